"""Base class for JSON API handlers."""
from flask import jsonify, request
from typing import Type, Dict, Any, Callable, Optional
from pydantic import BaseModel, ValidationError as PydanticValidationError
from shared.validation import ValidationError, format_pydantic_errors
from ..exceptions import DuplicateKeyError, NotFoundError
from ..models import db
from ..utils import api_error, handle_api_exception
import logging


class CRUDBase:
    """Base class providing request parsing and error mapping for blueprints.

    ``run`` executes one operation and turns the domain errors into JSON
    responses:

    - ``ValidationError`` / ``DuplicateKeyError`` -> 400
    - ``NotFoundError`` -> 404
    - anything else -> 500 with a generic message (details only in the log)

    Subclasses set ``messages`` to customize the client-facing texts per
    operation.
    """

    default_messages = {
        'not_found': 'Data not found',
        'internal': 'Internal server error',
    }

    def __init__(self, logger_name: Optional[str] = None):
        """Initialize CRUD base class.

        Args:
            logger_name: Optional logger name (defaults to class name)
        """
        self.logger = logging.getLogger(logger_name or self.__class__.__name__)

    def get_json_data(self) -> Dict[str, Any]:
        """Get and validate JSON data from request.

        Returns:
            Dictionary of request JSON data

        Raises:
            ValidationError: If JSON is invalid or not a dict
        """
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError('Request body must contain valid JSON')
        if not isinstance(data, dict):
            raise ValidationError('Request data must be a JSON object')
        return data

    def parse(self, schema: Type[BaseModel], data: Dict[str, Any]) -> BaseModel:
        """Validate request data with a pydantic schema.

        Raises:
            ValidationError: With all pydantic errors flattened into one message
        """
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(format_pydantic_errors(e))

    def run(self, operation: str, func: Callable, **messages) -> tuple:
        """Execute ``func`` and map its errors to JSON responses.

        Args:
            operation: Description used in log messages
            func: Callable returning a Flask response
            **messages: Overrides for ``not_found``, ``internal``,
                ``duplicate`` and ``invalid`` client messages

        Returns:
            Flask response
        """
        msgs = dict(self.default_messages, **messages)
        try:
            return func()
        except DuplicateKeyError as e:
            db.session.rollback()
            return api_error(msgs.get('duplicate', 'Consumer ID already exists'), 400,
                             details={'consumer_id': e.consumer_id})
        except NotFoundError as e:
            db.session.rollback()
            return api_error(msgs.get('not_found') or str(e), 404)
        except ValidationError as e:
            db.session.rollback()
            self.logger.warning(f"Validation error during {operation}: {e}")
            if 'invalid' in msgs:
                return api_error(msgs['invalid'], 400, error=str(e))
            return api_error(str(e), 400)
        except Exception as e:
            db.session.rollback()
            return handle_api_exception(e, operation, msgs['internal'])

    def respond(self, payload, status_code: int = 200) -> tuple:
        return jsonify(payload), status_code
