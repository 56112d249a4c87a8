import dataclasses
import os

from .common import compat_typing as t
from .common.annotations import type_hints
from .common.errors import ArityError, ConversionError, FieldError, MultiError, RecordError
from .config import FileConfig
from .fields import FieldSpec
from .logger import get_logger
from .registry import ConversionEntry, Registry, type_name

logger = get_logger('loader')


def env_list_to_map(pairs: t.Iterable[str]) -> t.Dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a dict

    Only the first "=" splits, so values may contain "=". An entry without "=" maps to an empty string.
    """
    env = {}
    for pair in pairs:
        key, _, value = pair.partition('=')
        env[key] = value
    return env


class Loader:
    """Populate dataclass fields from environment variables or any ``Dict[str, str]``.

    Fields are tagged through their metadata, see ``envcfg.fields.env_field``:

        ```python
        @dataclass
        class AppConfig:
            name: str = field(default='', metadata={'env': 'APP_NAME'})
            workers: int = field(default=0, metadata={'env': 'WORKERS', 'default': '4'})

        conf = AppConfig()
        Loader.new().populate_from_env(conf)
        ```

    Every data problem (missing value, type without conversion, failed conversion) is collected and raised
    together as one MultiError. Tag problems raise immediately and leave the record untouched.
    """

    def __init__(self, registry: t.Optional[Registry] = None) -> None:
        self.registry = registry if registry is not None else Registry()

    @classmethod
    def new(cls) -> 'Loader':
        """Loader with the built-in parsers registered"""
        return cls(Registry.with_defaults())

    @classmethod
    def empty(cls) -> 'Loader':
        """Loader without any conversion function"""
        return cls(Registry())

    def register(self, func: t.Any) -> ConversionEntry:
        """Register a conversion function, see ``Registry.register``"""
        return self.registry.register(func)

    def populate_from_map(self, vals: t.Mapping[str, str], record: t.Any) -> None:
        """Load config from the given mapping into the dataclass instance.

        Args:
            vals (Mapping[str, str]): source values
            record (Any): dataclass instance to populate

        Raises:
            RecordError: record is not a mutable dataclass instance
            TagError: defaults count or conversion arity does not match the keys of a field
            MultiError: one or more fields could not be populated
        """
        if not dataclasses.is_dataclass(record) or isinstance(record, type):
            raise RecordError(f'envcfg: {record!r} is not a dataclass instance')
        if record.__dataclass_params__.frozen:  # type: ignore[attr-defined]
            raise RecordError(f'envcfg: {record!r} is a frozen dataclass instance')

        record_type = type(record)
        record_name = record_type.__name__
        hints = type_hints(record_type)
        errors: t.List[Exception] = []
        resolved: t.List[t.Tuple[str, t.Any]] = []

        for field in dataclasses.fields(record):
            spec = FieldSpec.from_field(field, hints.get(field.name, field.type), record_name)
            if spec is None:
                continue
            entry = self.registry.lookup(spec.target_type)
            if entry is None:
                errors.append(
                    FieldError(
                        f'no conversion registered for type {type_name(spec.target_type)} '
                        f'({record_name}.{spec.name})',
                        record_name,
                        spec.name,
                    )
                )
                continue
            if entry.arity != len(spec.source_keys):
                raise ArityError(
                    f'envcfg: {record_name}.{spec.name} has {len(spec.source_keys)} keys '
                    f'but {entry.name} accepts {entry.arity} arguments'
                )

            args = []
            missing = False
            for index, key in enumerate(spec.source_keys):
                if key in vals:
                    args.append(vals[key])
                    logger.debug(f'{record_name}.{spec.name}: got {key}')
                elif spec.default_values is not None:
                    args.append(spec.default_values[index])
                    logger.debug(f'{record_name}.{spec.name}: {key} not set, using default')
                else:
                    missing = True
                    errors.append(
                        FieldError(
                            f'no {key} value found, and {record_name}.{spec.name} has no default',
                            record_name,
                            spec.name,
                        )
                    )
            if missing:
                continue

            try:
                resolved.append((spec.name, entry.invoke(*args)))
            except ConversionError as e:
                errors.append(FieldError(f'envcfg: cannot populate {spec.name}: {e}', record_name, spec.name))

        for name, value in resolved:
            setattr(record, name, value)
        if errors:
            error = MultiError(errors)
            logger.debug(str(error))
            raise error

    def populate_from_env(self, record: t.Any, environ: t.Optional[t.Mapping[str, str]] = None) -> None:
        """Load config from the process environment into the dataclass instance.

        Args:
            record (Any): dataclass instance to populate
            environ (Mapping[str, str], optional): use this mapping instead of ``os.environ``. Defaults to None.
        """
        self.populate_from_map(dict(os.environ if environ is None else environ), record)

    def populate_from_pairs(self, pairs: t.Iterable[str], record: t.Any) -> None:
        """Load config from ``KEY=VALUE`` strings, e.g. the "Env" list of a docker container."""
        self.populate_from_map(env_list_to_map(pairs), record)

    def populate_from_file(
        self, record: t.Any, config_file: t.Optional[str] = None, env_tag: str = 'default'
    ) -> None:
        """Load config from a section of a YAML config file, see ``envcfg.config.FileConfig``."""
        file_config = FileConfig(env_tag=env_tag, config_file=config_file)
        self.populate_from_map(file_config.as_mapping(), record)
