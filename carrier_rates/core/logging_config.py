# carrier_rates/core/logging_config.py
"""
Centralized logging configuration.

Keeps carrier_rates logs visible while quieting the HTTP client libraries.
"""

import logging
import os
from typing import Dict, Mapping, Optional

SENSITIVE_HEADERS = {"authorization", "proxy-authorization"}
REDACTED = "[REDACTED]"


def configure_logging(level: Optional[str] = None):
    """
    Configure logging for the application.

    - carrier_rates code: INFO (or LOG_LEVEL / the level passed in)
    - httpx / httpcore: WARNING only
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        level=resolved,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("carrier_rates").setLevel(resolved)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured at level: {log_level}")


def redact_headers(headers: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
    """Copy of headers with credential values masked, safe to log"""
    if headers is None:
        return None
    return {
        name: REDACTED if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }
