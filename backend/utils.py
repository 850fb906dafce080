"""Backend utility functions for the meter application service."""
from flask import jsonify, current_app
from .repositories.application_repository import ApplicationRepository
import logging


logger = logging.getLogger(__name__)


def api_error(message, status_code=400, log_level='warning', error=None, details=None):
    """
    Standardized API error response with consistent logging.

    Args:
        message (str): Error message for the client
        status_code (int): HTTP status code
        log_level (str): Logging level ('debug', 'info', 'warning', 'error', 'critical')
        error (str, optional): Extra client-facing detail, sent as ``error``
        details (dict, optional): Additional details for logging only

    Returns:
        Flask response: JSON error response
    """
    log_func = getattr(logger, log_level, logger.warning)
    if details:
        log_func(f"API Error ({status_code}): {message} - Details: {details}")
    else:
        log_func(f"API Error ({status_code}): {message}")

    body = {'message': message}
    if error is not None:
        body['error'] = error
    return jsonify(body), status_code


def handle_api_exception(e, operation="operation", message="Internal server error", status_code=500):
    """
    Handle unexpected exceptions in API endpoints.

    The exception is logged with its traceback; the client only receives
    the generic ``message``.

    Args:
        e (Exception): The exception that occurred
        operation (str): Description of the operation being performed
        message (str): Generic message returned to the client
        status_code (int): HTTP status code to return

    Returns:
        Flask response: JSON error response
    """
    logger.error(f"Exception during {operation}: {str(e)}", exc_info=True)
    return api_error(message, status_code, 'error')


def get_repository():
    """Build a repository on the request's database session."""
    return ApplicationRepository(id_attempts=current_app.config.get('APPLICATION_ID_MAX_ATTEMPTS', 5))
