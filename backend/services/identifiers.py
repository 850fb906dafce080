"""ApplicationID generation."""
import uuid
import logging
from tenacity import (
    Retrying,
    RetryError,
    stop_after_attempt,
    retry_if_exception_type,
    before_sleep_log,
)
from ..exceptions import IdentifierGenerationError


logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class IdentifierCollision(Exception):
    """Raised internally when a candidate identifier is already taken."""
    pass


def generate_application_id(exists, max_attempts=DEFAULT_MAX_ATTEMPTS, factory=None):
    """Generate an ApplicationID that no stored record uses yet.

    This is a read-only pre-check; the unique constraint on
    ``applications.application_id`` is what actually guards concurrent
    creations.

    Args:
        exists: Callable returning True when a record already uses the candidate
        max_attempts (int): Candidates to try before giving up
        factory: Candidate generator (defaults to random UUID4 strings)

    Returns:
        str: A free identifier

    Raises:
        IdentifierGenerationError: If every candidate collided
    """
    factory = factory or (lambda: str(uuid.uuid4()))

    def attempt():
        candidate = factory()
        if exists(candidate):
            raise IdentifierCollision(candidate)
        return candidate

    retryer = Retrying(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_exception_type(IdentifierCollision),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    try:
        return retryer(attempt)
    except RetryError as e:
        logger.error(f"No free ApplicationID after {max_attempts} attempts")
        raise IdentifierGenerationError(
            f"Could not generate a unique ApplicationID after {max_attempts} attempts"
        ) from e
