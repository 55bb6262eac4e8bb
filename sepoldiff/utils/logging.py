import logging as _logging
from typing import cast

DEBUG = _logging.DEBUG
INFO = _logging.INFO
VERBOSE = (INFO + DEBUG) // 2
_logging.addLevelName(VERBOSE, "VERBOSE")
WARNING = _logging.WARNING
ERROR = _logging.ERROR


class Logger(_logging.Logger):
    def verbose(self, msg: str, *args, **kwargs) -> None:
        if self.isEnabledFor(VERBOSE):
            self._log(VERBOSE, msg, args, **kwargs)


def get_logger(name: str) -> Logger:
    previous = _logging.getLoggerClass()
    _logging.setLoggerClass(Logger)
    try:
        return cast(Logger, _logging.getLogger(name))
    finally:
        _logging.setLoggerClass(previous)


def parse_level(name: str) -> int:
    level = _logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level '{name}'")
    return level
