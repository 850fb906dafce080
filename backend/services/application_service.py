"""Creation flow for application records."""
import logging
from ..exceptions import DuplicateKeyError


logger = logging.getLogger(__name__)


def create_application(repository, image_store, payload):
    """Create an application record, saving its optional images first.

    The ConsumerID is checked before any image is written. If persisting
    the record fails afterwards, the images written for it are discarded
    best-effort and the error propagates.

    Args:
        repository: ApplicationRepository
        image_store: ImageStore
        payload: Validated ApplicationCreate

    Returns:
        ApplicationRecord: The stored record

    Raises:
        DuplicateKeyError: If the ConsumerID already exists
    """
    if repository.exists_by_consumer_id(payload.consumer_id):
        raise DuplicateKeyError(payload.consumer_id)

    fields = payload.record_fields()
    saved = []
    try:
        if payload.meter_image:
            fields['meter_image_data'] = image_store.save(payload.meter_image)
            saved.append(fields['meter_image_data'])
        if payload.timer_panel_image:
            fields['timer_panel_image'] = image_store.save(payload.timer_panel_image)
            saved.append(fields['timer_panel_image'])

        return repository.create(fields)
    except Exception:
        for result in image_store.discard(saved):
            logger.debug(f"Discarded image {result.name} after failed creation (deleted={result.deleted})")
        raise
