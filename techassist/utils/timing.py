"""
Stage and call timing.

    with Timer("keyword_fallback", ctx.stage_timings):
        merged = enrich_with_keyword_fallback(...)

    @timed("embed_query")
    def embed_query(text): ...

Elapsed times are logged and, when a ``timings`` dict is supplied,
stored under the label in seconds.
"""

from __future__ import annotations

import functools
import time
from typing import Any, Callable, MutableMapping

from techassist.utils.logging import get_logger

logger = get_logger("techassist.timing")


class Timer:
    """Context manager measuring wall-clock time with ``perf_counter``."""

    def __init__(self, label: str = "", timings: MutableMapping[str, float] | None = None):
        self.label = label
        self.timings = timings
        self._start = 0.0
        self.elapsed_s = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_s * 1000

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, *_: Any) -> None:
        self.elapsed_s = time.perf_counter() - self._start
        if not self.label:
            return
        if self.timings is not None:
            self.timings[self.label] = self.elapsed_s
        if exc_type is None:
            logger.info("%s completed in %.1fms", self.label, self.elapsed_ms)
        else:
            logger.info("%s failed after %.1fms (%s)", self.label, self.elapsed_ms, exc_type.__name__)


def timed(label: str | None = None) -> Callable:
    """Log the duration of every call to the decorated (sync) function."""

    def decorator(fn: Callable) -> Callable:
        name = label or fn.__qualname__

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with Timer(name):
                return fn(*args, **kwargs)

        return wrapper

    return decorator
