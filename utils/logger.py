import logging
import sys
from datetime import datetime
from colorama import init, Fore, Style

# Initialize colorama
init(autoreset=True)

class CustomFormatter(logging.Formatter):
    """
    Custom formatter with color coding for different levels/tags.
    tags: ERROR, NETWORK, DISCORD, DETECTION, SWEEP
    """

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA + Style.BRIGHT,
        'NETWORK': Fore.BLUE,
        'DISCORD': Fore.MAGENTA,
        'DETECTION': Fore.RED + Style.BRIGHT,
        'SWEEP': Fore.CYAN
    }

    def format(self, record: logging.LogRecord) -> str:
        tag = getattr(record, 'tag', record.levelname)
        color = self.COLORS.get(tag, Fore.WHITE)

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        # Structure: [TIMESTAMP] [TAG] Message
        log_fmt = f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} {color}[{tag}]{Style.RESET_ALL} %(message)s"
        return logging.Formatter(log_fmt).format(record)

def setup_logger(name: str = "Cadence") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Console handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomFormatter())

    if not logger.handlers:
        logger.addHandler(handler)

    return logger

class TaggedLogger:
    """Thin wrapper so call sites can write log.network(...), log.detection(...) etc."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, msg: str):
        self._logger.debug(msg, extra={'tag': 'DEBUG'})

    def info(self, msg: str):
        self._logger.info(msg, extra={'tag': 'INFO'})

    def warning(self, msg: str):
        self._logger.warning(msg, extra={'tag': 'WARNING'})

    def error(self, msg: str, exc_info=None):
        self._logger.error(msg, exc_info=exc_info, extra={'tag': 'ERROR'})

    def network(self, msg: str):
        self._logger.info(msg, extra={'tag': 'NETWORK'})

    def discord(self, msg: str):
        self._logger.info(msg, extra={'tag': 'DISCORD'})

    def detection(self, msg: str):
        self._logger.warning(msg, extra={'tag': 'DETECTION'})

    def sweep(self, msg: str):
        self._logger.info(msg, extra={'tag': 'SWEEP'})

# Global logger instance
_core = TaggedLogger(setup_logger("Cadence"))

def get_logger() -> TaggedLogger:
    return _core

def set_debug(enabled: bool):
    """Development runs also print DEBUG lines (e.g. dropped malformed events)."""
    _core._logger.setLevel(logging.DEBUG if enabled else logging.INFO)
