"""Resolve type annotations of records and conversion functions.

``typing.get_type_hints`` gives up on the whole object as soon as one annotation
cannot be evaluated, e.g. a class local to a function under
``from __future__ import annotations``. Here such names become
``ForwardRef`` objects, all the other annotations are still resolved.
"""

import builtins
import sys

from . import compat_typing as t


class _LenientNamespace(dict):
    """Name lookup for ``eval``: module globals, then builtins, then a forward reference"""

    def __init__(self, globalns: t.Mapping[str, t.Any]) -> None:
        super().__init__()
        self.globalns = globalns

    def __missing__(self, key: str) -> t.Any:
        if key in self.globalns:
            return self.globalns[key]
        if hasattr(builtins, key):
            return getattr(builtins, key)
        return t.ForwardRef(key)


def resolve_annotation(annotation: t.Any, globalns: t.Mapping[str, t.Any]) -> t.Any:
    """Evaluate a string annotation, unknown names are kept as ``ForwardRef``.

    Non-string annotations are returned as is, so is a string that does not evaluate.
    """
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, {}, _LenientNamespace(globalns))  # pylint: disable=eval-used
    except Exception:  # pylint: disable=broad-except
        return annotation


def _module_globals(obj: t.Any) -> t.Mapping[str, t.Any]:
    module = sys.modules.get(getattr(obj, '__module__', None) or '')
    return vars(module) if module is not None else {}


def type_hints(obj: t.Any) -> t.Dict[str, t.Any]:
    """Type hints of a class (with its bases) or a function, resolved one name at a time on failure"""
    try:
        return t.get_type_hints(obj)
    except (NameError, TypeError, AttributeError, SyntaxError):
        pass
    hints: t.Dict[str, t.Any] = {}
    if isinstance(obj, type):
        for klass in reversed(obj.__mro__):
            globalns = _module_globals(klass)
            for name, annotation in t.own_annotations(klass).items():
                hints[name] = resolve_annotation(annotation, globalns)
        return hints
    globalns = getattr(obj, '__globals__', None)
    if globalns is None:
        globalns = _module_globals(obj)
    for name, annotation in t.own_annotations(obj).items():
        hints[name] = resolve_annotation(annotation, globalns)
    return hints
