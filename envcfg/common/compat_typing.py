# pylint: disable=unused-import
# flake8: noqa: F401
# ruff: noqa: F401
import inspect
import sys
from typing import (
    Any,
    Callable,
    Dict,
    ForwardRef,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

if sys.version_info >= (3, 10):
    from types import UnionType
else:
    # "X | Y" annotations do not exist before 3.10
    UnionType = Union


def own_annotations(obj: Any) -> Dict[str, Any]:
    """Annotations declared on the object itself, not evaluated and without the inherited ones"""
    if sys.version_info >= (3, 10):
        return dict(inspect.get_annotations(obj))
    if isinstance(obj, type):
        return dict(obj.__dict__.get('__annotations__', {}))
    return dict(getattr(obj, '__annotations__', {}))
