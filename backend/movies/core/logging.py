"""
Movies Catalog - Logging Configuration
======================================

Structured logging on top of structlog and the standard library, with
request-scoped context (request id, acting user) bound into every entry.

Usage:
    from movies.core.logging import get_logger, setup_logging

    # Setup logging (call once at startup)
    setup_logging()

    # Get logger for module
    logger = get_logger(__name__)
    logger.info("Created movie", movie_id=str(movie.id))
"""

import os
import sys
import json
import logging
import logging.handlers
from datetime import datetime, timezone
from typing import Optional, List
from pathlib import Path
from contextvars import ContextVar

import structlog
from structlog.stdlib import LoggerFactory, add_logger_name, add_log_level
from structlog.dev import ConsoleRenderer
from structlog.processors import TimeStamper, StackInfoRenderer, format_exc_info

from movies.core.config import settings

# ==========================================
# CONTEXT VARIABLES FOR REQUEST TRACKING
# ==========================================

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)


# ==========================================
# CUSTOM STRUCTLOG PROCESSORS
# ==========================================

def add_request_context(logger, method_name, event_dict):
    """Add request context to log entries"""
    request_id = request_id_var.get()
    user_id = user_id_var.get()

    if request_id:
        event_dict['request_id'] = request_id
    if user_id:
        event_dict['user_id'] = user_id

    return event_dict


def add_app_context(logger, method_name, event_dict):
    """Add application context to log entries"""
    event_dict.update({
        'app_name': settings.APP_NAME,
        'app_version': settings.APP_VERSION,
        'environment': settings.ENVIRONMENT,
    })
    return event_dict


def add_process_info(logger, method_name, event_dict):
    event_dict['process_id'] = os.getpid()
    return event_dict


def censor_sensitive_data(logger, method_name, event_dict):
    """Mask credentials and tokens before they reach any handler"""
    sensitive_keys = {
        'password', 'token', 'secret', 'authorization',
        'cookie', 'api_key', 'access_token', 'database_url'
    }

    def _censor_dict(obj, max_depth=5):
        if max_depth <= 0:
            return obj

        if isinstance(obj, dict):
            return {
                k: "***CENSORED***" if any(sens in str(k).lower() for sens in sensitive_keys)
                else _censor_dict(v, max_depth - 1)
                for k, v in obj.items()
            }
        elif isinstance(obj, (list, tuple)):
            return type(obj)(_censor_dict(item, max_depth - 1) for item in obj)
        else:
            return obj

    return _censor_dict(event_dict)


# ==========================================
# CUSTOM FORMATTERS
# ==========================================

class JSONFormatter(logging.Formatter):
    """JSON formatter for file logs"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info) if settings.DEBUG else None,
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# ==========================================
# LOGGING SETUP
# ==========================================

def setup_logging() -> None:
    """Setup structured logging with console and optional file output"""

    processors = [
        structlog.contextvars.merge_contextvars,
        add_request_context,
        add_app_context,
        add_process_info,
        censor_sensitive_data,
        add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    elif settings.LOG_FORMAT == "structured":
        processors.append(ConsoleRenderer(colors=sys.stdout.isatty()))
    else:  # simple format
        processors.append(ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT == "simple":
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    else:
        # structlog has already rendered the event
        console_handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_path,
            when="midnight",
            backupCount=7,
            encoding='utf-8'
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # SQLAlchemy logging
    if settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance for the given name"""
    return structlog.get_logger(name)


# ==========================================
# CONTEXT MANAGERS FOR REQUEST TRACKING
# ==========================================

class LogContext:
    """Context manager for adding contextual information to logs"""

    _VARS = {
        'request_id': request_id_var,
        'user_id': user_id_var,
    }

    def __init__(self, **context):
        self.context = context
        self.tokens = []

    def __enter__(self):
        for key, value in self.context.items():
            var = self._VARS.get(key)
            if var is None:
                continue
            self.tokens.append((var, var.set(value)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for var, token in reversed(self.tokens):
            var.reset(token)
        self.tokens.clear()


def with_request_context(request_id: str, user_id: Optional[str] = None) -> LogContext:
    """Context manager for request logging"""
    context = {'request_id': request_id}
    if user_id:
        context['user_id'] = user_id

    return LogContext(**context)


# ==========================================
# STRUCTURED LOGGING HELPERS
# ==========================================

def log_database_operation(
    operation: str,
    table: str,
    duration: float,
    rows_affected: int = 0,
):
    """Log database operation with structured data"""

    db_logger = get_logger("database")

    db_logger.debug(
        "Database operation",
        operation=operation,
        table=table,
        duration_ms=round(duration * 1000, 2),
        rows_affected=rows_affected,
    )


def validate_logging_config() -> List[str]:
    """Validate logging configuration"""
    errors = []

    valid_formats = ["simple", "structured", "json"]
    if settings.LOG_FORMAT not in valid_formats:
        errors.append(f"Invalid LOG_FORMAT: {settings.LOG_FORMAT}")

    return errors


__all__ = [
    "setup_logging",
    "get_logger",
    "LogContext",
    "with_request_context",
    "log_database_operation",
    "validate_logging_config",
    "request_id_var",
    "user_id_var",
]
