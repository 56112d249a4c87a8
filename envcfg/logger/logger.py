import logging

module_logger = logging.getLogger('envcfg')

DEFAULT_LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s - %(message)s'


def get_logger(suffix: str = '') -> logging.Logger:
    """get a child logger from envcfg, returning the parent logger if suffix is not given."""
    if not suffix:
        return module_logger
    return module_logger.getChild(suffix)


class MultiLineFormatter(logging.Formatter):
    """indent for multiple lines

    Aggregated populate errors span several lines, logging output:

    ::

        [2025-06-10 13:05:17] DEBUG envcfg.loader - 2 errors occurred:

            * no DB_URL value found, and AppConfig.db_url has no default
            * envcfg: cannot populate port: invalid literal for int() with base 10: 'abc'

    """

    def format(self, record: logging.LogRecord) -> str:
        s = super().format(record)
        return s.replace('\n', '\n    ')


def add_console_handler(level: int = logging.DEBUG, fmt: str = DEFAULT_LOG_FORMAT) -> logging.Handler:
    """Attach a stream handler using MultiLineFormatter to the envcfg logger.

    The library installs no handler by itself, call this from scripts or tests when debugging.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(MultiLineFormatter(fmt))
    handler.setLevel(level)
    module_logger.addHandler(handler)
    if module_logger.level == logging.NOTSET or module_logger.level > level:
        module_logger.setLevel(level)
    return handler
