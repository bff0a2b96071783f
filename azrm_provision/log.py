"""Logging setup for the command line"""

import logging
import sys
from typing import Optional

NOISY_LOGGERS = (
    'azure',
    'azure.core.pipeline.policies.http_logging_policy',
    'azure.mgmt',
    'azure.identity',
    'urllib3',
)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Log to stdout, and to log_file when given"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    # Reduce Azure SDK logging verbosity
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
