"""Repository for application records and their response sub-records."""
import uuid
import logging
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from shared.enums import GroupField
from shared.models import ApplicationRecord, ResponseRecord, current_date_time
from shared.schemas import ApplicationSchema
from shared.validation import ValidationError
from ..exceptions import DuplicateKeyError
from ..models import db
from ..services.identifiers import generate_application_id, DEFAULT_MAX_ATTEMPTS


# Columns behind the grouped-count field paths
GROUP_COLUMNS = {
    GroupField.WARD: ApplicationRecord.ward_committee,
    GroupField.RESPONSE_WARD: ResponseRecord.ward_committee,
}


def new_response_id():
    """Generate a sub-identifier for a response record."""
    return uuid.uuid4().hex


class ApplicationRepository:
    """Database operations for application records.

    Lookups use the business key (ConsumerID). Methods that change data
    commit on success and roll back before re-raising on failure.
    """

    def __init__(self, session=None, id_attempts=DEFAULT_MAX_ATTEMPTS):
        """Initialize repository.

        Args:
            session: SQLAlchemy session (defaults to the Flask-SQLAlchemy scoped session)
            id_attempts (int): ApplicationID candidates to try per creation
        """
        self.session = session if session is not None else db.session
        self.id_attempts = id_attempts
        self.logger = logging.getLogger(self.__class__.__name__)

    def _commit(self):
        """Commit, mapping constraint violations to validation errors."""
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ValidationError(f"Constraint violation: {e.orig}") from e
        except Exception:
            self.session.rollback()
            raise

    # Queries
    def find_all(self):
        """Get all records in creation order."""
        return self.session.scalars(select(ApplicationRecord).order_by(ApplicationRecord.id)).all()

    def find_by_consumer_id(self, consumer_id):
        """Get a record by ConsumerID, or None."""
        return self.session.scalars(
            select(ApplicationRecord).filter_by(consumer_id=consumer_id)
        ).first()

    def exists_by_consumer_id(self, consumer_id):
        return self.find_by_consumer_id(consumer_id) is not None

    def exists_by_application_id(self, application_id):
        return self.session.scalar(
            select(func.count()).select_from(ApplicationRecord).filter_by(application_id=application_id)
        ) > 0

    def find_by_date(self, date):
        """Get records whose stored date equals ``date`` (YYYY-MM-DD)."""
        return self.session.scalars(
            select(ApplicationRecord).filter_by(date=date).order_by(ApplicationRecord.id)
        ).all()

    def find_by_year_month(self, year, month):
        """Get records whose stored date starts with ``YYYY-MM``.

        The month is zero-padded, so ``3`` matches ``2024-03-..``.
        """
        prefix = f"{year}-{int(month):02d}"
        return self.session.scalars(
            select(ApplicationRecord)
            .where(ApplicationRecord.date.startswith(prefix, autoescape=True))
            .order_by(ApplicationRecord.id)
        ).all()

    def count_grouped_by(self, field_path):
        """Count records (or response sub-records) grouped by a field.

        Args:
            field_path: ``WardCommittee`` or ``Response.WardCommittee``

        Returns:
            list: (group value, count) tuples sorted ascending by group value
        """
        try:
            column = GROUP_COLUMNS[GroupField(field_path)]
        except ValueError:
            raise ValidationError(f"Unsupported group field: {field_path}")

        rows = self.session.execute(
            select(column, func.count()).group_by(column).order_by(column.asc())
        ).all()
        return [(value, count) for value, count in rows]

    # Mutations
    def create(self, fields):
        """Persist a new record with a fresh ApplicationID and creation timestamp.

        Args:
            fields (dict): Column values including ``consumer_id``

        Returns:
            ApplicationRecord: The stored record

        Raises:
            DuplicateKeyError: If the ConsumerID is already taken
        """
        consumer_id = fields['consumer_id']
        if self.exists_by_consumer_id(consumer_id):
            raise DuplicateKeyError(consumer_id)

        application_id = generate_application_id(
            self.exists_by_application_id, max_attempts=self.id_attempts
        )
        date, time = current_date_time()
        record = ApplicationRecord(application_id=application_id, date=date, time=time, **fields)
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            # A concurrent creation won the unique constraint race
            if self.exists_by_consumer_id(consumer_id):
                raise DuplicateKeyError(consumer_id) from e
            raise
        except Exception:
            self.session.rollback()
            raise

        self.logger.info(f"Created application {application_id} for consumer {consumer_id}")
        return record

    def delete_by_consumer_id(self, consumer_id):
        """Delete a record (and its responses) by ConsumerID.

        Image files are left in place. Returns an ApplicationSchema snapshot
        of the deleted record, or None.
        """
        record = self.find_by_consumer_id(consumer_id)
        if record is None:
            return None

        # Snapshot before the commit expires and detaches the instance
        snapshot = ApplicationSchema.model_validate(record)
        self.session.delete(record)
        self._commit()
        self.logger.info(f"Deleted application for consumer {consumer_id}")
        return snapshot

    def add_response(self, record, fields):
        """Append a response sub-record to ``record`` in a single commit."""
        response = ResponseRecord(id=new_response_id(), consumer_id=record.consumer_id, **fields)
        record.responses.append(response)
        self._commit()
        return response

    def remove_response(self, record, response):
        """Remove ``response`` from ``record``; remaining positions are renumbered."""
        record.responses.remove(response)
        record.responses.reorder()
        self._commit()

    def update_by_consumer_id(self, consumer_id, fields, responses=None):
        """Apply a resolved partial update to a record.

        Args:
            consumer_id: Business key of the record
            fields (dict): Scalar column values to set
            responses (list, optional): Resolved response entries; when given
                they replace the stored sequence. Each entry is a dict of
                column values plus ``id`` (None for a new entry) and
                optional ``date``/``time``.

        Returns:
            ApplicationRecord or None when no record matches
        """
        record = self.find_by_consumer_id(consumer_id)
        if record is None:
            return None

        for key, value in fields.items():
            setattr(record, key, value)

        if responses is not None:
            self._replace_responses(record, responses)

        self._commit()
        self.logger.info(f"Updated application for consumer {consumer_id}")
        return record

    def _replace_responses(self, record, entries):
        """Replace the response sequence, reusing rows whose id is kept."""
        existing = {response.id: response for response in record.responses}
        seen = set()
        replacement = []

        for entry in entries:
            entry = dict(entry)
            response_id = entry.pop('id', None)
            response = existing.get(response_id) if response_id else None

            if response is None:
                # Ids of other records' responses are never taken over
                response = ResponseRecord(id=new_response_id())
                if not entry.get('date'):
                    entry['date'], entry['time'] = current_date_time()
            elif response_id in seen:
                raise ValidationError(f"Duplicate response _id in update: {response_id}")
            seen.add(response.id)

            for key, value in entry.items():
                setattr(response, key, value)
            response.consumer_id = record.consumer_id
            replacement.append(response)

        # Rows left out of the replacement are removed by the delete-orphan cascade
        record.responses = replacement
        record.responses.reorder()
