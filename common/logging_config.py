import logging
import os
import sys
from typing import Optional


LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _build_formatter(run_id: Optional[str] = None) -> logging.Formatter:
    if run_id:
        return logging.Formatter(
            f'%(asctime)s - %(name)s - %(levelname)s - [{run_id}] - %(message)s',
            datefmt=LOG_DATE_FORMAT
        )
    return logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt=LOG_DATE_FORMAT
    )


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    run_id: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    The component logger is the parent of the package loggers
    (e.g. 'builder' for 'builder.chunker'), so module loggers created with
    logging.getLogger(__name__) share its handler.

    Args:
        component_name: Name of the component (e.g., 'builder', 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO
        run_id: Optional run identifier to include in log format

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
            if run_id:
                handler.setFormatter(_build_formatter(run_id))
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_build_formatter(run_id))

    logger.addHandler(handler)
    logger.propagate = False

    return logger
