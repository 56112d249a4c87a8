from .logger import MultiLineFormatter, add_console_handler, get_logger  # noqa: F401
