"""Domain errors raised by the repository and services.

Validation failures use ``shared.validation.ValidationError``; anything not
listed here is treated as an internal error by the API layer.
"""


class RecordError(Exception):
    """Base class for application record errors."""
    pass


class DuplicateKeyError(RecordError):
    """Raised when creating a record whose ConsumerID already exists."""

    def __init__(self, consumer_id):
        self.consumer_id = consumer_id
        super().__init__(f"Consumer ID already exists: {consumer_id}")


class NotFoundError(RecordError):
    """Raised when a record or response sub-record does not exist."""
    pass


class IdentifierGenerationError(RecordError):
    """Raised when no free ApplicationID was found within the attempt budget."""
    pass
