"""
Advanced Logging Module

Structured logging for the clustering engine:
- structlog setup for the command-line entry point (JSON or console rendering)
- Loggers that stay on stdlib logging when the engine is embedded as a library
- Timed clustering runs that report what the run produced
"""

import logging
import logging.handlers
import time
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.types import Processor


# =============================================================================
# Structured Logging Configuration
# =============================================================================


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    log_file: Optional[str] = None,
    service_name: str = "projection-clustering",
) -> None:
    """
    Route stdlib and structlog output through one renderer.

    Only the application entry point should call this; library users keep
    whatever stdlib logging setup they already have.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
        log_file: Optional log file, rotated at 10MB
        service_name: Bound to every event as ``service``
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level)
    logging.root.setLevel(level)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=3
        )
        file_handler.setLevel(level)
        logging.root.addHandler(file_handler)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger bound to ``name``.

    Before ``configure_logging`` has run, events are handed to the stdlib
    logger of the same name as a message plus ``extra`` fields, so they obey
    the host application's levels and handlers.
    """
    if structlog.is_configured():
        return structlog.get_logger(name)

    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


# =============================================================================
# Clustering Run Logger
# =============================================================================


class ClusteringRunLogger:
    """
    Context manager timing one clustering run.

    Logs ``clustering_completed`` with the outcome recorded through
    :meth:`record`, or ``clustering_failed`` with the error code and details
    when the run raises. Exceptions always propagate.

    Example:
        with ClusteringRunLogger("dbscan", n_points=len(dataset)) as run:
            result = clusterer.cluster(dataset)
            run.record(result)
    """

    def __init__(
        self,
        algorithm: str,
        n_points: int,
        logger: Optional[Any] = None,
        **context: Any,
    ):
        self.algorithm = algorithm
        self.n_points = n_points
        self.logger = logger or get_logger(__name__)
        self.context = context
        self.outcome: dict = {}
        self._start: Optional[float] = None

    def record(self, result: Any) -> None:
        """Remember the cluster and noise counts of a finished result."""
        self.outcome = {
            "n_clusters": result.n_clusters,
            "noise_points": result.outlier_count,
        }
        if result.iterations is not None:
            self.outcome["iterations"] = result.iterations

    def __enter__(self) -> "ClusteringRunLogger":
        self._start = time.perf_counter()
        self.logger.debug(
            "clustering_started",
            algorithm=self.algorithm,
            n_points=self.n_points,
            **self.context,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        duration_ms = round((time.perf_counter() - self._start) * 1000, 3)
        event = {
            "algorithm": self.algorithm,
            "n_points": self.n_points,
            "duration_ms": duration_ms,
            **self.context,
        }

        if exc_type is None:
            self.logger.info("clustering_completed", **event, **self.outcome)
            return

        event["error_type"] = exc_type.__name__
        event["error_code"] = getattr(exc_val, "error_code", None)
        event["error_details"] = getattr(exc_val, "details", None)
        self.logger.error("clustering_failed", **event)
