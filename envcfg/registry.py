"""Registry of conversion functions, keyed by the type they produce.

A conversion function takes one or more ``str`` arguments and returns a pair
``(value, error)``, declared through its annotations:

.. code:: python

    def parse_port(s: str) -> t.Tuple[Port, t.Optional[Exception]]:
        ...

The first element of the return annotation is the type the function produces,
it is the key the function is registered under.
"""

import inspect
from dataclasses import dataclass

from .common import compat_typing as t
from .common.annotations import type_hints
from .common.errors import ConversionError, DuplicateConversionError, RegistrationError
from .logger import get_logger
from .parsers import DEFAULT_PARSERS

logger = get_logger('registry')

ConversionFunc = t.Callable[..., t.Tuple[t.Any, t.Optional[Exception]]]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def func_name(func: t.Any) -> str:
    """Dotted name used to identify a conversion function in error messages"""
    qualname = getattr(func, '__qualname__', None)
    if qualname is None:
        return repr(func)
    module = getattr(func, '__module__', None)
    if module:
        return f'{module}.{qualname}'
    return str(qualname)


def type_name(tp: t.Any) -> str:
    if isinstance(tp, t.ForwardRef):
        return tp.__forward_arg__
    if isinstance(tp, type):
        if tp.__module__ == 'builtins':
            return tp.__qualname__
        return f'{tp.__module__}.{tp.__qualname__}'
    return repr(tp)


def _safe_str(obj: t.Any) -> str:
    try:
        return str(obj)
    except Exception as e:  # pylint: disable=broad-except
        return f'<{type(obj).__name__} str() failed: {type(e).__name__}>'


@dataclass(frozen=True)
class ConversionEntry:
    """A validated conversion function, as stored in the registry."""

    func: ConversionFunc
    arity: int
    produces: t.Any
    name: str

    def invoke(self, *args: str) -> t.Any:
        """Call the conversion function and return the produced value.

        Raises:
            ValueError: the number of arguments differs from the arity.
            ConversionError: the function returned an error, or raised an exception.
        """
        if len(args) != self.arity:
            raise ValueError(f'envcfg: {self.name} accepts {self.arity} arguments, got {len(args)}')
        try:
            result = self.func(*args)
        except Exception as e:  # pylint: disable=broad-except
            raise ConversionError(f'{self.name} raised {type(e).__name__}: {_safe_str(e)}') from e
        if not (isinstance(result, tuple) and len(result) == 2):
            raise ConversionError(f'{self.name} returned a {type(result).__name__}, not a (value, error) tuple')
        value, error = result
        if error is not None:
            raise ConversionError(_safe_str(error))
        return value


def _resolve_hints(func: t.Any) -> t.Dict[str, t.Any]:
    target = func
    if not (inspect.isfunction(func) or inspect.ismethod(func)):
        target = getattr(func, '__call__', func)
    return type_hints(target)


def _is_error_type(tp: t.Any) -> bool:
    if isinstance(tp, type):
        return issubclass(tp, Exception)
    if t.get_origin(tp) in (t.Union, t.UnionType):
        members = [m for m in t.get_args(tp) if m is not type(None)]
        return bool(members) and all(isinstance(m, type) and issubclass(m, Exception) for m in members)
    return False


def inspect_conversion(func: t.Any) -> ConversionEntry:
    """Validate the shape of a conversion function and build its entry.

    Args:
        func (Any): the conversion function

    Raises:
        RegistrationError: the function shape is not ``(str, ...) -> Tuple[T, Optional[Exception]]``

    Returns:
        ConversionEntry: entry ready to be stored in a registry
    """
    if not callable(func):
        raise RegistrationError(f'envcfg: {func!r} is not callable')
    name = func_name(func)
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise RegistrationError(f'envcfg: cannot inspect the signature of {name}: {e}') from e
    hints = _resolve_hints(func)

    params = list(sig.parameters.values())
    if not params:
        raise RegistrationError(
            f'envcfg: conversion function should accept at least 1 string argument. {name} accepts 0 arguments'
        )
    for param in params:
        if param.kind not in _POSITIONAL:
            raise RegistrationError(
                f'envcfg: conversion function should only accept positional string arguments. '
                f'{name} has a {param.kind.description} parameter "{param.name}"'
            )
        annotation = hints.get(param.name, param.annotation)
        if annotation not in (str, 'str'):
            if annotation is inspect.Parameter.empty:
                described = 'an unannotated'
            else:
                described = f'a {type_name(annotation)}'
            raise RegistrationError(
                f'envcfg: conversion function should accept string arguments. '
                f'{name} accepts {described} argument "{param.name}"'
            )

    returns = hints.get('return', sig.return_annotation)
    if returns is inspect.Signature.empty:
        raise RegistrationError(
            f'envcfg: conversion function should return 2 values. {name} has no return annotation'
        )
    if t.get_origin(returns) is not tuple:
        raise RegistrationError(
            f'envcfg: conversion function should return 2 values. {name} returns {type_name(returns)}'
        )
    returned = t.get_args(returns)
    if len(returned) != 2 or returned[-1] is Ellipsis:
        count = 'a variable number of' if returned and returned[-1] is Ellipsis else len(returned)
        raise RegistrationError(f'envcfg: conversion function should return 2 values. {name} returns {count} values')
    produces, error_type = returned
    if not _is_error_type(error_type):
        raise RegistrationError(
            f"envcfg: conversion function's last return value should be an exception. "
            f"{name}'s last return value is {type_name(error_type)}"
        )
    return ConversionEntry(func=func, arity=len(params), produces=produces, name=name)


class Registry:
    """Conversion functions keyed by the exact type they produce.

    Example usage:

        ```python
        registry = Registry.with_defaults()
        registry.register(parse_port)
        entry = registry.lookup(Port)
        port = entry.invoke('8080')
        ```

    Registration is meant to happen once at startup, lookups are safe from several threads afterwards.
    """

    def __init__(self) -> None:
        self.entries: t.Dict[t.Any, ConversionEntry] = {}

    @classmethod
    def with_defaults(cls) -> 'Registry':
        """Registry seeded with the built-in parsers"""
        registry = cls()
        registry.register_all(DEFAULT_PARSERS)
        return registry

    def register(self, func: t.Any) -> ConversionEntry:
        """Validate a conversion function and register it for the type it produces.

        Args:
            func (Any): function taking one or more str, returning ``(value, error)``

        Raises:
            RegistrationError: the function has a wrong shape.
            DuplicateConversionError: the produced type already has a conversion function.

        Returns:
            ConversionEntry: the stored entry
        """
        entry = inspect_conversion(func)
        existing = self.entries.get(entry.produces)
        if existing is not None:
            raise DuplicateConversionError(
                f'envcfg: a conversion function has already been registered for the '
                f'{type_name(entry.produces)} type. cannot also register {entry.name}'
            )
        self.entries[entry.produces] = entry
        logger.debug(f'Registered {entry.name} for {type_name(entry.produces)} (arity {entry.arity})')
        return entry

    def register_all(self, funcs: t.Iterable[t.Any]) -> None:
        for func in funcs:
            self.register(func)

    def lookup(self, tp: t.Any) -> t.Optional[ConversionEntry]:
        """Return the entry registered for exactly this type, or None"""
        try:
            return self.entries.get(tp)
        except TypeError:
            # unhashable annotation, nothing can be registered for it
            return None

    def __contains__(self, tp: t.Any) -> bool:
        return self.lookup(tp) is not None

    def __len__(self) -> int:
        return len(self.entries)
