"""Filesystem image store for base64 uploads."""
import os
import uuid
import logging
from dataclasses import dataclass
from typing import Optional
from flask import current_app
from werkzeug.utils import secure_filename
from shared.validation import Validator, ValidationError


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of a best-effort file deletion.

    Callers log it and move on; a failed cleanup never fails the request.
    """
    name: Optional[str]
    deleted: bool
    error: Optional[str] = None


class ImageStore:
    """Writes and deletes image attachments in the uploads directory.

    Records only ever hold the bare filename returned by ``save``.
    """

    def __init__(self, uploads_dir):
        """Initialize the store.

        Args:
            uploads_dir: Directory holding the uploaded images (created lazily)
        """
        self.uploads_dir = os.path.abspath(uploads_dir)
        self.logger = logging.getLogger(self.__class__.__name__)

    def ensure_dir(self):
        """Create the uploads directory if it does not exist."""
        os.makedirs(self.uploads_dir, exist_ok=True)

    def _safe_name(self, name):
        """Reduce a name to a plain filename inside the uploads directory."""
        safe = secure_filename(name or '')
        if not safe:
            raise ValidationError(f"Invalid image file name: {name!r}")
        return safe

    def path_for(self, name):
        """Get absolute path for a stored image name."""
        return os.path.join(self.uploads_dir, self._safe_name(name))

    def exists(self, name):
        """Check whether a stored image is present on disk."""
        if not name:
            return False
        try:
            return os.path.isfile(self.path_for(name))
        except ValidationError:
            return False

    def list_files(self):
        """List the filenames currently in the uploads directory."""
        if not os.path.isdir(self.uploads_dir):
            return []
        return sorted(
            entry for entry in os.listdir(self.uploads_dir)
            if os.path.isfile(os.path.join(self.uploads_dir, entry))
        )

    def save(self, payload, name=None, avoid=()):
        """Decode a base64 image and write it to the uploads directory.

        Args:
            payload (str): Base64 image data, optionally with a data-URL header
            name (str, optional): Filename stem; a random UUID with a ``.png``
                extension is used when omitted
            avoid: Filenames still referenced elsewhere; a named save that
                would overwrite one of them gets a random suffix instead.
                So does a name that sanitizing changes, since two distinct
                names (``C/1`` and ``C_1``) may sanitize to the same file.

        Returns:
            str: Stored filename (not a path)

        Raises:
            ValidationError: If the payload is not valid base64
            OSError: If the file cannot be written
        """
        image_bytes, extension = Validator.decode_base64_image(payload)

        if name:
            requested = f"{name}.{extension}"
            stored_name = self._safe_name(requested)
            if stored_name != requested or stored_name in avoid:
                stored_name = self._safe_name(f"{name}_{uuid.uuid4().hex[:8]}.{extension}")
        else:
            stored_name = f"{uuid.uuid4()}.{Validator.DEFAULT_IMAGE_EXTENSION}"

        self.ensure_dir()
        image_path = os.path.join(self.uploads_dir, stored_name)
        try:
            with open(image_path, 'wb') as f:
                f.write(image_bytes)
        except OSError as e:
            self.logger.error(f"Failed to write image {stored_name}: {e}")
            raise

        self.logger.info(f"Saved image {stored_name} ({len(image_bytes)} bytes)")
        return stored_name

    def delete(self, name):
        """Delete a stored image, best-effort.

        Missing files and OS errors are logged and reported in the result,
        never raised.

        Returns:
            CleanupResult: What happened to the file
        """
        if not name:
            return CleanupResult(name=name, deleted=False)

        try:
            os.remove(self.path_for(name))
        except FileNotFoundError:
            self.logger.warning(f"Stale image {name} already missing from uploads")
            return CleanupResult(name=name, deleted=False, error='missing')
        except (OSError, ValidationError) as e:
            self.logger.error(f"Failed to delete stale image {name}: {e}")
            return CleanupResult(name=name, deleted=False, error=str(e))

        self.logger.info(f"Deleted stale image {name}")
        return CleanupResult(name=name, deleted=True)

    def discard(self, names):
        """Best-effort delete of several images, returning their results."""
        return [self.delete(name) for name in names if name]


def get_image_store():
    """Get the image store bound to the current Flask app."""
    store = current_app.extensions.get('image_store')
    if store is None:
        store = ImageStore(current_app.config['UPLOADS_DIR'])
        current_app.extensions['image_store'] = store
    return store
