"""
profilehub/core/logging.py

Purpose: Logging configuration

- Standardizes log format
- Controls log levels
- JSON logs in production, readable logs in development
- Context tracking (unique_slug, method, path)
"""

import logging
import sys
import json
from datetime import datetime
from contextvars import ContextVar
from typing import Any, Dict, Optional
from profilehub.core.config import settings, Settings

CONTEXT_FIELDS = ("unique_slug", "method", "path")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("profilehub_log_context", default={})


class LogContextFilter(logging.Filter):
    """
    Copies LogContext fields onto each record passing through a handler.
    Fields already set on the record (e.g. via extra=) are left untouched.
    """
    
    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logging in production.
    Makes logs easily parseable by monitoring tools.
    """
    
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        
        # Add extra context if available
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        
        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        
        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development environment.
    """
    
    def format(self, record: logging.LogRecord) -> str:
        # Color codes for different log levels
        colors = {
            "DEBUG": "\033[36m",      # Cyan
            "INFO": "\033[32m",       # Green
            "WARNING": "\033[33m",    # Yellow
            "ERROR": "\033[31m",      # Red
            "CRITICAL": "\033[35m",   # Magenta
        }
        reset = "\033[0m"
        
        color = colors.get(record.levelname, reset)
        
        # Format timestamp
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        
        # Base message
        message = f"{color}[{timestamp}] {record.levelname:<8}{reset} {record.name}: {record.getMessage()}"
        
        # Add context if available
        context_parts = []
        if hasattr(record, "unique_slug"):
            context_parts.append(f"slug={record.unique_slug}")
        if hasattr(record, "path"):
            context_parts.append(f"path={record.path}")
        
        if context_parts:
            message += f" [{', '.join(context_parts)}]"
        
        # Add exception if present
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        
        return message


def setup_logging(config: Optional[Settings] = None):
    """
    Configures application-wide logging with appropriate formatters.
    Uses JSON format in production, human-readable in development.
    """
    config = config or settings
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    
    # Create handler
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(LogContextFilter())
    
    # Choose formatter based on environment
    if config.is_production:
        formatter = StructuredFormatter()
    else:
        formatter = DevelopmentFormatter()
    
    handler.setFormatter(formatter)
    
    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    
    # Set third-party loggers to WARNING to reduce noise
    for noisy in ("motor", "pymongo", "botocore", "boto3", "multipart", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    
    # Create app logger
    logger = logging.getLogger("profilehub")
    logger.info(
        "Logging configured",
        extra={
            "environment": config.ENVIRONMENT,
            "log_level": config.LOG_LEVEL,
            "debug_mode": config.DEBUG
        }
    )
    
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.
    
    Args:
        name: Logger name (usually __name__)
    
    Returns:
        Configured logger instance
    """
    if name.startswith("profilehub"):
        return logging.getLogger(name)
    return logging.getLogger(f"profilehub.{name}")


class LogContext:
    """
    Context manager for adding structured context to logs.
    
    Context is held per asyncio task, so concurrent requests don't see
    each other's fields.
    
    Usage:
        with LogContext(unique_slug="alice123"):
            logger.info("Creating user")
    """
    
    def __init__(self, **kwargs):
        self.context = kwargs
        self._token = None
    
    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
