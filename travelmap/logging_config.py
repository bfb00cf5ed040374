import logging
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: str = "INFO", stream=None) -> None:
    """
    Configures the root logger with a single console handler.
    Calling it again replaces the previous handler, so the handler count stays at one.
    Writes to the given stream, or sys.stderr so stdout stays free for command output.
    """
    numeric_level = LEVELS.get(level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Returns a named logger; handlers come from setup_logging()."""
    return logging.getLogger(name)
