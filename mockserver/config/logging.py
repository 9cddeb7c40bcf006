"""
Logging configuration for the mock server.

This module provides centralized logging configuration with support for
structured logging, different log levels, and multiple output formats.
"""

import logging
import logging.config
import sys
from typing import Any, Dict, Optional


def get_logging_config(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    enable_access_log: bool = True
) -> Dict[str, Any]:
    """
    Get logging configuration dictionary.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'text')
        log_file: Optional log file path
        enable_access_log: Whether to enable HTTP access logging

    Returns:
        Logging configuration dictionary
    """
    log_level = log_level.upper()

    formatters = {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(module)s %(lineno)d %(message)s"
        }
    }

    formatter_name = "json" if log_format == "json" else "detailed"

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": formatter_name,
            "stream": sys.stdout
        }
    }

    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": formatter_name,
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf8"
        }

    handler_names = list(handlers.keys())
    loggers: Dict[str, Dict[str, Any]] = {
        "": {
            "level": log_level,
            "handlers": handler_names,
            "propagate": False
        },
        "uvicorn": {
            "level": log_level,
            "handlers": handler_names,
            "propagate": False
        },
        "uvicorn.error": {
            "level": log_level,
            "handlers": handler_names,
            "propagate": False
        },
        "fastapi": {
            "level": log_level,
            "handlers": handler_names,
            "propagate": False
        },
        "mockserver": {
            "level": log_level,
            "handlers": handler_names,
            "propagate": False
        }
    }

    if enable_access_log:
        loggers["uvicorn.access"] = {
            "level": "INFO",
            "handlers": handler_names,
            "propagate": False
        }
    else:
        loggers["uvicorn.access"] = {
            "level": "WARNING",
            "handlers": handler_names,
            "propagate": False
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers
    }


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
    enable_access_log: bool = True
) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'text')
        log_file: Optional log file path
        enable_access_log: Whether to enable HTTP access logging
    """
    config = get_logging_config(
        log_level=log_level,
        log_format=log_format,
        log_file=log_file,
        enable_access_log=enable_access_log
    )

    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class StructuredLogger:
    """
    Structured logger for consistent log message formatting.

    Every event is logged with a fixed message and its fields attached as
    ``extra`` so the JSON formatter emits them as top-level keys.
    """

    def __init__(self, name: str):
        self.logger = get_logger(name)

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        response_time: float,
        client_ip: Optional[str] = None,
        **kwargs
    ):
        """Log one handled HTTP request.

        Args:
            method: HTTP method
            path: Request path
            status_code: Response status code
            response_time: Response time in milliseconds
            client_ip: Client IP address
            **kwargs: Additional fields to log
        """
        log_data = {
            "event": "http_request",
            "method": method,
            "path": path,
            "status_code": status_code,
            "response_time_ms": round(response_time, 3),
        }

        if client_ip:
            log_data["client_ip"] = client_ip

        log_data.update(kwargs)

        if status_code >= 500:
            self.logger.error("HTTP request", extra=log_data)
        elif status_code >= 400:
            self.logger.warning("HTTP request", extra=log_data)
        else:
            self.logger.info("HTTP request", extra=log_data)

    def log_upstream_call(
        self,
        url: str,
        method: str,
        status_code: int,
        response_time: float,
        success: bool,
        error: Optional[str] = None,
        **kwargs
    ):
        """Log a forwarded call to the default upstream.

        Args:
            url: Upstream URL that was called
            method: HTTP method
            status_code: Upstream status code, 0 when no response arrived
            response_time: Response time in milliseconds
            success: Whether a response was received
            error: Error message if the call failed
            **kwargs: Additional fields to log
        """
        log_data = {
            "event": "upstream_call",
            "url": url,
            "method": method,
            "status_code": status_code,
            "response_time_ms": round(response_time, 3),
            "success": success,
        }

        if error:
            log_data["error"] = error

        log_data.update(kwargs)

        if success:
            self.logger.info("Upstream call", extra=log_data)
        else:
            self.logger.error("Upstream call failed", extra=log_data)

    def log_config_change(
        self,
        accepted: bool,
        endpoint_count: int,
        version: Optional[int] = None,
        error: Optional[str] = None,
        **kwargs
    ):
        """Log the outcome of a configuration replace."""
        log_data = {
            "event": "config_change",
            "accepted": accepted,
            "endpoint_count": endpoint_count,
        }

        if version is not None:
            log_data["config_version"] = version
        if error:
            log_data["error"] = error

        log_data.update(kwargs)

        if accepted:
            self.logger.info("Configuration replaced", extra=log_data)
        else:
            self.logger.warning("Configuration rejected", extra=log_data)

