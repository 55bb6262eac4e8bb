from functools import wraps
from logging import DEBUG, Logger
from time import perf_counter
from typing import Callable, ParamSpec, TypeVar

ParamsT = ParamSpec("ParamsT")
ReturnT = TypeVar("ReturnT")


def trace(
    logger: Logger,
    *,
    log_args: bool = True,
    log_ret: bool = True,
) -> Callable[
    [Callable[ParamsT, ReturnT]], Callable[ParamsT, ReturnT]
]:
    """Log entry, exit with elapsed time, and exceptions of the decorated call.

    Nothing is formatted unless ``logger`` is enabled for DEBUG.
    """

    def decorator(func: Callable[ParamsT, ReturnT]) -> Callable[ParamsT, ReturnT]:
        name = func.__qualname__

        @wraps(func)
        def wrapper(*args: ParamsT.args, **kwargs: ParamsT.kwargs) -> ReturnT:
            if not logger.isEnabledFor(DEBUG):
                return func(*args, **kwargs)
            logger.debug(
                "%s enter%s", name, f" args={args!r} kwargs={kwargs!r}" if log_args else ""
            )
            start = perf_counter()
            try:
                retvalue = func(*args, **kwargs)
            except Exception as ex:
                logger.debug("%s except %s", name, ex)
                raise
            logger.debug(
                "%s exit after %.3fs%s",
                name,
                perf_counter() - start,
                f" ret={retvalue!r}" if log_ret else "",
            )
            return retvalue

        return wrapper

    return decorator
