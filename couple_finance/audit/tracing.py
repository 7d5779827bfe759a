"""
Trace spans for the aggregation path.

Per-item decisions (why a fixed income was left out of a month, and so on)
are logged at debug level inside a span, so they only show up when debug
logging is switched on.
"""

import time
from contextlib import contextmanager
from typing import Any, Iterator

import structlog


TRACE_LOGGER_NAME = "couple_finance.trace"


@contextmanager
def trace_span(name: str, **context: Any) -> Iterator[Any]:
    """
    Log `<name>.start` and `<name>.end` (or `<name>.error`) at debug level.

    Yields a logger bound to the span so callers can log decisions inside it.
    """
    log = structlog.get_logger(TRACE_LOGGER_NAME).bind(span=name, **context)
    started = time.perf_counter()
    log.debug(f"{name}.start")
    try:
        yield log
    except Exception as exc:
        log.debug(
            f"{name}.error",
            error=str(exc),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        raise
    log.debug(
        f"{name}.end",
        elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
    )
