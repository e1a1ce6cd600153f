"""Instrumentation for closet repository and telemetry calls."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from stylist_app.logging_config import ensure_correlation_id, get_logger, log_event, redact_for_log

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _preview_kwargs(kwargs: dict, max_keys: int = 6) -> dict:
    preview: dict = {}
    for idx, (key, value) in enumerate(kwargs.items()):
        if idx >= max_keys:
            preview["truncated"] = True
            break
        preview[key] = value
    return redact_for_log(preview)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def instrument_call(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a callable to emit start, completion and failure events with timings."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()

            log_event(
                LOGGER,
                logging.DEBUG,
                "call_started",
                operation=operation,
                correlation_id=correlation_id,
                kwargs=_preview_kwargs(kwargs),
            )
            try:
                result = func(*args, **kwargs)
            except Exception:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "call_failed",
                    operation=operation,
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(start),
                    exc_info=True,
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "call_completed",
                operation=operation,
                correlation_id=correlation_id,
                duration_ms=_elapsed_ms(start),
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_call"]
