"""
envcfg - Load config from environment variables into dataclasses.

This module provides:
- Loader: populate dataclass fields from env variables, a dict, or a YAML config file.
- Registry: conversion functions from strings to typed values, keyed by the produced type.
- env_field: declare the source keys and defaults of a field.

A default loader with the built-in parsers is created on import, simple cases can use the module functions:

    ```python
    @dataclass
    class AppConfig:
        name: str = env_field('APP_NAME', default='demo', zero='')
        port: int = env_field('PORT', zero=0)

    conf = AppConfig()
    envcfg.populate_from_env(conf)
    ```
"""

from .common import compat_typing as t
from .common.errors import (  # noqa: F401
    ArityError,
    ConversionError,
    DuplicateConversionError,
    EnvcfgError,
    FieldError,
    MultiError,
    RecordError,
    RegistrationError,
    TagError,
)
from .fields import env_field  # noqa: F401
from .loader import Loader, env_list_to_map  # noqa: F401
from .registry import ConversionEntry, Registry  # noqa: F401

__version__ = '0.1.0'

try:
    _default_loader = Loader.new()
except RegistrationError as e:
    # only a built-in parser with a wrong signature can get here
    raise RuntimeError(f'could not init default loader: {e}') from e


def default_loader() -> Loader:
    return _default_loader


def register(func: t.Any) -> ConversionEntry:
    """Register a conversion function on the default loader"""
    return _default_loader.register(func)


def populate_from_map(vals: t.Mapping[str, str], record: t.Any) -> None:
    """Load config from the given mapping into the dataclass instance, using the default loader"""
    _default_loader.populate_from_map(vals, record)


def populate_from_env(record: t.Any, environ: t.Optional[t.Mapping[str, str]] = None) -> None:
    """Load config from the process environment into the dataclass instance, using the default loader"""
    _default_loader.populate_from_env(record, environ)


def populate_from_file(record: t.Any, config_file: t.Optional[str] = None, env_tag: str = 'default') -> None:
    """Load config from a YAML config file section into the dataclass instance, using the default loader"""
    _default_loader.populate_from_file(record, config_file, env_tag)
