"""Merge partial updates into application records, reconciling image files.

Image fields in an update carry new base64 data. A new image is written
under a deterministic name (``meterImage_<ConsumerID>.png``,
``poleImage_<ConsumerID>_<index>.png``...; a random suffix is added when the
ConsumerID is not filename-safe) and the file it supersedes is deleted once
the update has been committed. Image fields that are absent,
empty, or echo the stored filename keep the stored reference.

Entries of the ``Response`` array are matched to stored entries by ``_id``
when the client sends any, and otherwise by position. Positional matching
breaks if a client reorders or drops entries without sending ``_id``.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set
from shared.enums import ImageField
from ..exceptions import NotFoundError


logger = logging.getLogger(__name__)

RECORD_IMAGE_FIELDS = (
    ('meter_image_data', ImageField.METER_IMAGE),
    ('timer_panel_image', ImageField.TIMER_PANEL_IMAGE),
)


@dataclass
class ImageChanges:
    """Files written by an update and files it supersedes."""
    referenced: Set[str] = field(default_factory=set)
    written: List[str] = field(default_factory=list)
    superseded: List[str] = field(default_factory=list)


def _resolve_image(image_store, changes, incoming, current, name) -> Optional[str]:
    """Return the filename to store for one image slot."""
    if not incoming or incoming == current:
        return current

    # Never overwrite a file another slot of the record still points at
    avoid = changes.referenced - {current}
    stored = image_store.save(incoming, name=name, avoid=avoid)
    if stored != current:
        changes.written.append(stored)
        if current:
            changes.superseded.append(current)
    return stored


def _current_images(record):
    """All filenames the stored record references."""
    names = {getattr(record, attr) for attr, _ in RECORD_IMAGE_FIELDS}
    names.update(response.pole_image_data for response in record.responses)
    names.discard(None)
    return names


def _match_stored(entry, index, stored, by_id):
    """Find the stored response an update entry corresponds to.

    With ``by_id`` set, entries without ``_id`` are new; otherwise entries
    are matched by position.
    """
    if by_id is not None:
        return by_id.get(entry.id) if entry.id else None
    return stored[index] if index < len(stored) else None


def _resolve_responses(image_store, changes, record, entries):
    stored = list(record.responses)
    by_id = None
    if any(entry.id for entry in entries):
        by_id = {response.id: response for response in stored}
    resolved = []

    for index, entry in enumerate(entries):
        existing = _match_stored(entry, index, stored, by_id)
        fields = entry.record_fields()
        # Unknown _id values are not reused; new entries get a generated id
        fields['id'] = existing.id if existing is not None else None
        fields['pole_image_data'] = _resolve_image(
            image_store, changes,
            entry.pole_image_data,
            existing.pole_image_data if existing is not None else None,
            f"{ImageField.POLE_IMAGE.value}_{record.consumer_id}_{index}",
        )
        if existing is not None:
            fields['date'], fields['time'] = existing.date, existing.time
        resolved.append(fields)

    # Entries dropped from the sequence no longer reference their images
    kept_ids = {fields['id'] for fields in resolved if fields['id']}
    for response in stored:
        if response.id not in kept_ids and response.pole_image_data:
            changes.superseded.append(response.pole_image_data)

    return resolved


def reconcile(repository, image_store, consumer_id, update):
    """Apply a partial update to the record identified by ``consumer_id``.

    Args:
        repository: ApplicationRepository
        image_store: ImageStore
        consumer_id: Business key of the record
        update: Validated ApplicationUpdate

    Returns:
        ApplicationRecord: The updated record

    Raises:
        NotFoundError: If no record matches
        ValidationError: If the resolved document violates a constraint
    """
    record = repository.find_by_consumer_id(consumer_id)
    if record is None:
        raise NotFoundError('Document not found')

    changes = ImageChanges(referenced=_current_images(record))
    fields = update.scalar_fields()
    try:
        for attr, image_field in RECORD_IMAGE_FIELDS:
            fields[attr] = _resolve_image(
                image_store, changes,
                getattr(update, attr),
                getattr(record, attr),
                f"{image_field.value}_{consumer_id}",
            )

        responses = None
        if update.responses is not None:
            responses = _resolve_responses(image_store, changes, record, update.responses)

        updated = repository.update_by_consumer_id(consumer_id, fields, responses)
        if updated is None:
            raise NotFoundError('Document not found')
    except Exception:
        for result in image_store.discard(changes.written):
            logger.debug(f"Discarded image {result.name} after failed update (deleted={result.deleted})")
        raise

    referenced = {fields[attr] for attr, _ in RECORD_IMAGE_FIELDS}
    if responses is not None:
        referenced.update(entry['pole_image_data'] for entry in responses)
    else:
        referenced.update(response.pole_image_data for response in updated.responses)

    for result in image_store.discard(name for name in changes.superseded if name not in referenced):
        if result.error:
            logger.warning(f"Could not remove superseded image {result.name}: {result.error}")

    logger.info(f"Reconciled update for consumer {consumer_id}: "
                f"{len(changes.written)} images written, {len(changes.superseded)} superseded")
    return updated
