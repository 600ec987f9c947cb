"""
Structured logging helpers for the design pipeline

Stage timing for the pipeline, a timing decorator for the heavier engine
calls, and the data-quality summary written after input normalization.
"""

import time
import logging
from typing import Dict, Any, Optional, Callable, TypeVar, Sequence
from contextlib import contextmanager
from functools import wraps

logger = logging.getLogger(__name__)

T = TypeVar('T')


@contextmanager
def log_operation(stage: str, context: Dict[str, Any], stage_logger: Optional[logging.Logger] = None):
    """
    Log start, completion or failure of one pipeline stage.

    Usage:
        with log_operation("manual_d", {"rooms": 6}, logger):
            result = designer.design_system(airflows)

    The exception is re-raised after the failure record is written.
    """
    log = stage_logger or logger
    extra = {'stage': stage, 'context': context}
    started = time.perf_counter()

    log.info(f"Starting {stage}", extra=dict(extra, status='started'))
    try:
        yield
    except Exception as e:
        elapsed = time.perf_counter() - started
        log.error(f"Failed {stage} after {elapsed:.3f}s: {e}", extra=dict(
            extra, status='failed', duration_seconds=elapsed, error_type=type(e).__name__))
        raise

    elapsed = time.perf_counter() - started
    log.info(f"Completed {stage} in {elapsed:.3f}s", extra=dict(extra, status='completed', duration_seconds=elapsed))


def timed_operation(name: Optional[str] = None):
    """
    Decorator logging the wall time of an engine call at DEBUG.

    Usage:
        @timed_operation("orientation_sweep")
        def calculate_multi_orientation(self, data):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        label = name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                logger.debug(f"[TIMING] {label} took {time.perf_counter() - started:.4f}s")

        return wrapper
    return decorator


def log_data_quality(source_shape: str, quality_score: float, applied_defaults: Sequence[str],
                     quality_logger: Optional[logging.Logger] = None):
    """
    Summarize how much of a normalized input was defaulted.

    Args:
        source_shape: Payload shape the input came from ('manual_j' or 'envelope')
        quality_score: 1.0 for a complete payload, lower per applied default
        applied_defaults: One entry per defaulted field ("design.latitude: 40.0")
        quality_logger: Logger to write to (module logger if None)
    """
    log = quality_logger or logger
    log.info(
        f"[DATA_QUALITY] {source_shape} input: score {quality_score:.2f}, {len(applied_defaults)} defaults applied",
        extra={'context': {
            'source_shape': source_shape,
            'quality_score': quality_score,
            'applied_defaults': list(applied_defaults),
        }},
    )
    for item in applied_defaults:
        log.debug(f"[DATA_QUALITY] defaulted {item}")
