"""
Structured logging configuration with trace IDs
"""
import logging
import uuid
import contextvars
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from chatroom.core.config import Settings

# Context variable to store trace ID across requests
trace_id_var = contextvars.ContextVar('trace_id', default=None)

# Fields copied from `extra=` into the JSON record
EXTRA_FIELDS = ('user_id', 'username', 'message_id', 'duration_ms', 'status_code', 'method', 'path')

_HANDLER_MARK = '_chatroom_handler'


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with trace ID and additional fields"""

    def __init__(self, *args, service: str = 'chatroom', **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['service'] = self.service

        trace_id = trace_id_var.get()
        if trace_id:
            log_record['trace_id'] = trace_id

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure root logging once; later calls only adjust the level"""
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL.upper())

    if any(getattr(h, _HANDLER_MARK, False) for h in root_logger.handlers):
        return root_logger

    if settings.LOG_JSON:
        formatter = CustomJsonFormatter('%(levelname)s %(name)s %(message)s', service=settings.APP_NAME)
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        root_logger.addHandler(handler)

    # Reduce noise from libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    return root_logger


def get_trace_id() -> Optional[str]:
    """Get current trace ID"""
    return trace_id_var.get()


def set_trace_id(trace_id: Optional[str]):
    """Set trace ID for current context"""
    trace_id_var.set(trace_id)


def generate_trace_id() -> str:
    """Generate a new trace ID"""
    return str(uuid.uuid4())
