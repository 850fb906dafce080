"""Append and remove survey responses on an application record."""
import logging
from shared.models import current_date_time
from ..exceptions import NotFoundError


logger = logging.getLogger(__name__)


def append_response(repository, image_store, consumer_id, payload):
    """Append a response sub-record to the application identified by ``consumer_id``.

    The parent is looked up before the optional pole image is written, so a
    missing ConsumerID never leaves a stray file behind.

    Args:
        repository: ApplicationRepository
        image_store: ImageStore
        consumer_id: Business key of the parent record
        payload: Validated ResponseCreate

    Returns:
        ApplicationRecord: The updated parent record

    Raises:
        NotFoundError: If no record matches ``consumer_id``
    """
    record = repository.find_by_consumer_id(consumer_id)
    if record is None:
        raise NotFoundError("Consumer ID not found")

    fields = payload.record_fields()
    fields['date'], fields['time'] = current_date_time()
    fields['pole_image_data'] = None

    if payload.pole_image:
        fields['pole_image_data'] = image_store.save(payload.pole_image)

    try:
        response = repository.add_response(record, fields)
    except Exception:
        image_store.discard([fields['pole_image_data']])
        raise

    logger.info(f"Appended response {response.id} to consumer {consumer_id} "
                f"({len(record.responses)} responses)")
    return record


def remove_response(repository, image_store, consumer_id, response_id):
    """Remove the response sub-record ``response_id`` from an application.

    The removed entry's pole image is deleted best-effort after the commit.

    Returns:
        ApplicationRecord: The updated parent record

    Raises:
        NotFoundError: If the record or the sub-record does not exist
    """
    record = repository.find_by_consumer_id(consumer_id)
    if record is None:
        raise NotFoundError("Consumer ID or Response not found")

    response = next((r for r in record.responses if r.id == response_id), None)
    if response is None:
        raise NotFoundError("Consumer ID or Response not found")

    stale_image = response.pole_image_data
    repository.remove_response(record, response)
    logger.info(f"Removed response {response_id} from consumer {consumer_id}")

    result = image_store.delete(stale_image)
    if result.error:
        logger.warning(f"Pole image cleanup for response {response_id} failed: {result.error}")
    return record
