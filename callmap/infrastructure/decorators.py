"""
Decorators for cross-cutting concerns of the analysis pipeline.

Decorators:
-   `timing_decorator`: Logs the execution time of a synchronous function.
"""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

from callmap.core import logs as ls

P = ParamSpec("P")
T = TypeVar("T")


def timing_decorator(func: Callable[P, T]) -> Callable[P, T]:
    """
    Decorator that logs the execution time of a synchronous function.

    Args:
        func: The function to wrap.

    Returns:
        The wrapped function.
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug(ls.FUNC_TIMING.format(func=func.__qualname__, time=elapsed))

    return wrapper
