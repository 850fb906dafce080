"""Logging configuration for backend."""
import logging
import os
import json
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request
from shared.models import now


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for the rotating log file."""

    def format(self, record):
        log_entry = {
            'timestamp': now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if has_request_context():
            log_entry['request'] = f"{request.method} {request.path}"

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Fields passed as extra={'extra_fields': {...}}
        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, default=str)


def setup_logging(log_level='INFO', log_dir=None):
    """Setup logging configuration for the backend.

    Args:
        log_level (str): Level name for the root logger
        log_dir (str, optional): Directory for the JSON log file; console only when None

    Returns:
        logging.Logger: The configured root logger
    """
    log_level_str = (log_level or 'INFO').upper()
    level = getattr(logging, log_level_str, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    simple_formatter = logging.Formatter(
        '%(asctime)s %(levelname)-8s %(name)-20s %(message)s'
    )

    # Clear existing handlers to avoid duplicates when the app is created twice
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter)
    logger.addHandler(console_handler)

    log_file = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, 'backend.log')
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    logging.getLogger('werkzeug').setLevel(logging.WARNING)  # Reduce Flask dev server noise
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)  # Reduce SQLAlchemy noise

    logger.info("Logging initialized", extra={
        'extra_fields': {
            'log_level': log_level_str,
            'log_file': log_file,
            'structured_logging': log_file is not None
        }
    })

    return logger
