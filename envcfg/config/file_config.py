import datetime
import os
import pathlib
import sys
from typing import Any, Dict, List, Optional

import yaml

from ..fields import SEPARATOR
from ..logger import get_logger

logger = get_logger('config')


def _env_flag(name: str) -> bool:
    return os.getenv(name, '').lower() in ('true', '1', 'yes', 'y')


def _to_source_string(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, datetime.date):
        # YAML timestamps, keep them RFC 3339 compatible
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return SEPARATOR.join(_to_source_string(key, v) for v in value)
    if isinstance(value, dict):
        raise ValueError(f'Nested mapping is not supported for key: {key}')
    return str(value)


class FileConfig:
    """Read source values from one section of a YAML config file.

    By default the config file is named "envcfg.yml" and put in one of those folders:
        - env variables: ENVCFG_CONFIG_FILE (full path of the file)
        - Current working directory
        - project root directory (env variables: PROJECT_ROOT_DIR)
        - <HOME>/.config/envcfg/  # non-win32

    Each top level key of the file is a section ("env_tag"), holding flat key/value pairs:

        ```yaml
        default:
            APP_NAME: demo
            WORKERS: 4
        production:
            APP_NAME: demo
            WORKERS: 16
            ALLOWED_HOSTS: [a.example.com, b.example.com]
        ```

    Example usage:

        ```python
        file_config = FileConfig(env_tag='production')
        loader.populate_from_map(file_config.as_mapping(), conf)
        ```
    """

    CONFIG_FILE_BASE_NAME = 'envcfg.yml'
    # Set config file directly
    CONFIG_FILE = os.getenv('ENVCFG_CONFIG_FILE', '')
    PROJECT_ROOT_DIR = os.getenv('PROJECT_ROOT_DIR', '')
    # only use the explicit config file, do not look for one in the search directories
    DISABLE_FILE_SEARCH = _env_flag('ENVCFG_DISABLE_FILE_SEARCH')

    def __init__(self, env_tag: str = 'default', config_file: Optional[str] = None) -> None:
        self.env_tag = env_tag
        if config_file:
            self.config_file = config_file
            if not os.path.isfile(config_file):
                raise FileNotFoundError(f'Could not open config file: {config_file}')
        else:
            self.config_file = self._get_config_file()
        self.config_data: Dict[str, Any] = {}
        if self.config_file:
            self.config_data = self._read_section(self.config_file, env_tag)

    @classmethod
    def _reload(cls) -> None:
        """Reload to accept new environment variables. Mainly used in unit tests."""
        cls.CONFIG_FILE = os.getenv('ENVCFG_CONFIG_FILE', '')
        cls.PROJECT_ROOT_DIR = os.getenv('PROJECT_ROOT_DIR', '')
        cls.DISABLE_FILE_SEARCH = _env_flag('ENVCFG_DISABLE_FILE_SEARCH')

    @classmethod
    def _search_dirs(cls) -> List[str]:
        search_dirs = []
        # Add current directory
        search_dirs.append(pathlib.Path('.'))
        # Add project root directory
        if cls.PROJECT_ROOT_DIR:
            search_dirs.append(pathlib.Path(cls.PROJECT_ROOT_DIR))
        # Add home directory
        if sys.platform != 'win32':
            search_dirs.append(pathlib.Path.home() / '.config' / 'envcfg')
        return [str(d) for d in search_dirs if d.is_dir()]

    @classmethod
    def _get_config_file(cls) -> str:
        if cls.CONFIG_FILE:
            if not os.path.isfile(cls.CONFIG_FILE):
                raise FileNotFoundError(f'Could not open config file: {cls.CONFIG_FILE}')
            return cls.CONFIG_FILE
        if cls.DISABLE_FILE_SEARCH:
            return ''
        for _dir in cls._search_dirs():
            if cls.CONFIG_FILE_BASE_NAME in os.listdir(_dir):
                # first match wins
                return os.path.join(_dir, cls.CONFIG_FILE_BASE_NAME)
        _msg = 'Can not find config file from:\n  ' + '\n  '.join(cls._search_dirs())
        logger.warning(_msg)
        return ''

    @staticmethod
    def _read_section(config_file: str, env_tag: str) -> Dict[str, Any]:
        with open(config_file, 'r', encoding='utf-8') as f:
            try:
                raw_data = yaml.safe_load(f.read())
            except yaml.YAMLError as e:
                raise ValueError(f'Invalid YAML in config file {config_file}: {e}') from e
        if not isinstance(raw_data, dict):
            raise ValueError(f'Config file root must be a mapping: {config_file}')
        if env_tag not in raw_data:
            raise ValueError(f'Section "{env_tag}" not found in config file: {config_file}')
        section = raw_data[env_tag]
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ValueError(f'Section "{env_tag}" must be a mapping: {config_file}')
        return section

    def as_mapping(self) -> Dict[str, str]:
        """Section values as strings, ready for ``Loader.populate_from_map``

        Booleans become "true"/"false", lists are joined with "," and null values are dropped.

        Raises:
            ValueError: a value is a nested mapping
        """
        mapping = {}
        for key, value in self.config_data.items():
            if value is None:
                continue
            mapping[str(key)] = _to_source_string(str(key), value)
        logger.debug(f'Got {len(mapping)} values from {self.config_file}/{self.env_tag}')
        return mapping
