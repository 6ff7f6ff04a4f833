"""
Logging configuration that keeps API keys out of log output
"""

import logging
import logging.config
import re
from typing import Dict, Any

# Matches an API key in a formatted message, skipping keys already followed by "..."
SECRET_PATTERN = re.compile(r"\bsk_[A-Za-z0-9_\-]+(?![A-Za-z0-9_\-]|\.\.\.)")


def _redact_match(match: "re.Match[str]") -> str:
    return match.group(0)[:10] + "..."


class SecretRedactionFilter(logging.Filter):
    """Filter that redacts API keys from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record message with any API key truncated."""
        message = record.getMessage()
        redacted = SECRET_PATTERN.sub(_redact_match, message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True  # Never drop records, only rewrite them


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with API key redaction."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_redaction_filter": {
                "()": SecretRedactionFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["secret_redaction_filter"]
            }
        },
        "loggers": {
            "owlauth": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def setup_logging(level: str = "INFO") -> None:
    """Apply the owlauth logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
