import dataclasses

from .common import compat_typing as t
from .common.errors import TagError

ENV_TAG = 'env'
DEFAULT_TAG = 'default'
SEPARATOR = ','


def env_field(
    keys: t.Union[str, t.Sequence[str]],
    default: t.Union[None, str, t.Sequence[str]] = None,
    *,
    zero: t.Any = None,
    **kwargs: t.Any,
) -> t.Any:
    """Declare a dataclass field populated from one or more source keys.

    Args:
        keys (Union[str, Sequence[str]]): source key, comma separated keys, or a list of keys
        default (Union[None, str, Sequence[str]], optional): fallback strings, one per key. Defaults to None.
        zero (Any, optional): value of the field before it is populated. Defaults to None.
        kwargs (Any): extra args pass to dataclasses.field, e.g. default_factory

    Example usage:

        ```python
        @dataclass
        class AppConfig:
            debug: bool = env_field('DEBUG', default='false', zero=False)
            server: Endpoint = env_field('HOST,PORT', default='localhost,8080')
        ```
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[ENV_TAG] = keys if isinstance(keys, str) else SEPARATOR.join(keys)
    if default is not None:
        metadata[DEFAULT_TAG] = default if isinstance(default, str) else SEPARATOR.join(default)
    if 'default_factory' not in kwargs:
        kwargs['default'] = zero
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """Source keys, defaults and target type of one tagged field"""

    name: str
    source_keys: t.Tuple[str, ...]
    default_values: t.Optional[t.Tuple[str, ...]]
    target_type: t.Any

    @classmethod
    def from_field(cls, field: dataclasses.Field, target_type: t.Any, record_name: str = '') -> t.Optional['FieldSpec']:
        """Read the tags of a dataclass field, None if the field is not tagged.

        Raises:
            TagError: the defaults count differs from the keys count
        """
        if ENV_TAG not in field.metadata:
            return None
        source_keys = tuple(key.strip() for key in str(field.metadata[ENV_TAG]).split(SEPARATOR))
        default_values = None
        if DEFAULT_TAG in field.metadata:
            default_values = tuple(str(field.metadata[DEFAULT_TAG]).split(SEPARATOR))
            if len(default_values) != len(source_keys):
                raise TagError(
                    f'envcfg: {record_name}.{field.name} has {len(source_keys)} keys '
                    f'but {len(default_values)} default values'
                )
        return cls(field.name, source_keys, default_values, target_type)
