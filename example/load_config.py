import logging
import sys
from dataclasses import dataclass
from datetime import timedelta

import envcfg
import envcfg.common.compat_typing as t
from envcfg import EnvcfgError, env_field
from envcfg.logger import add_console_handler


@dataclass
class Endpoint:
    host: str
    port: int


def parse_endpoint(host: str, port: str) -> t.Tuple[Endpoint, t.Optional[ValueError]]:
    if not port.isdigit():
        return Endpoint('', 0), ValueError(f'invalid port: {port}')
    return Endpoint(host, int(port)), None


@dataclass
class AppConfig:
    name: str = env_field('APP_NAME', default='demo', zero='')
    debug: bool = env_field('DEBUG', default='false', zero=False)
    timeout: timedelta = env_field('TIMEOUT', default='30s', zero=timedelta(0))
    server: Endpoint = env_field('HOST,PORT', default='localhost,8080')
    database_url: str = env_field('DATABASE_URL', zero='')


def main() -> None:
    add_console_handler(logging.DEBUG)
    envcfg.register(parse_endpoint)
    conf = AppConfig()
    try:
        envcfg.populate_from_env(conf)
    except EnvcfgError as e:
        logging.error(str(e))
        sys.exit(1)
    logging.info(f'Loaded config for {conf.name}, server {conf.server.host}:{conf.server.port}')


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    main()
