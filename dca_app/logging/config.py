"""
Centralized logging configuration for the DCA engine.

All modules log through structlog. Scheduler and backtest modules use the
subsystem-bound loggers below so that scheduling decisions and missed
executions can be filtered in aggregated output.
"""
import logging
import os
import sys
from datetime import datetime
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger

from ..utils.time import hours_between

LOG_LEVEL_ENV = "DCA_LOG_LEVEL"


def _build_processors(
    format_json: bool,
    include_timestamp: bool,
    include_caller: bool,
    extra_processors: Optional[list],
) -> list:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.MODULE,
                        structlog.processors.CallsiteParameter.FUNC_NAME]
        ))

    processors.extend(extra_processors or [])

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def configure_logging(
    level: Optional[str] = None,
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level name; defaults to $DCA_LOG_LEVEL, then INFO
        format_json: If True, output JSON lines; otherwise human-readable
        include_timestamp: Include a UTC ISO timestamp in log output
        include_caller: Include the calling module and function
        extra_processors: Additional structlog processors inserted before rendering
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=_build_processors(format_json, include_timestamp, include_caller, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_scheduler_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the recurrence scheduler subsystem."""
    return get_logger(name).bind(subsystem="scheduler")


def get_backtest_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the backtest subsystem."""
    return get_logger(name).bind(subsystem="backtest")


def log_schedule_decision(
    logger: FilteringBoundLogger,
    cadence: str,
    state: str,
    next_run_at: Optional[datetime],
    advances: int,
    degraded: bool = False,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a scheduling decision with standardized format.

    Args:
        logger: Structlog logger instance
        cadence: Cadence of the rule being scheduled
        state: Final scheduler state (seeking/done)
        next_run_at: Computed next run instant, None when done
        advances: Number of calendar advances applied after localizing
        degraded: Whether fallback arithmetic produced the instant
        context: Additional context data
    """
    bound_logger = logger.bind(
        cadence=cadence,
        scheduler_state=state,
        next_run_at=next_run_at.isoformat() if next_run_at else None,
        advances=advances,
        degraded=degraded,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if degraded:
        bound_logger.warning("Next run calculated with fallback arithmetic")
    else:
        bound_logger.info("Next run calculated")


def log_missed_execution(
    logger: FilteringBoundLogger,
    symbol_pair: str,
    target: datetime,
    last_observation_at: Optional[datetime],
) -> None:
    """Log a scheduled period skipped for lack of an acceptable price."""
    logger.debug(
        "Missed execution - no acceptable price observation",
        symbol_pair=symbol_pair,
        target=target.isoformat(),
        last_observation_at=last_observation_at.isoformat() if last_observation_at else None,
        staleness_hours=round(hours_between(last_observation_at, target), 1) if last_observation_at else None,
    )
