"""
Upload storage helpers

Files land in the default storage (MEDIA_ROOT) and are referenced everywhere
by their public path, e.g. ``/uploads/3f9c...e1.png``.
"""
import logging
import os
import uuid
from typing import Iterable, List

from django.conf import settings
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


def public_path(name: str) -> str:
    return f"{settings.MEDIA_URL.rstrip('/')}/{name}"


def save_uploads(files: Iterable) -> List[str]:
    """
    Persist uploaded files and return their public paths.

    If one file fails to save, the ones already written are removed before
    the error propagates.
    """
    paths = []
    try:
        for upload in files:
            _, ext = os.path.splitext(upload.name or '')
            name = default_storage.save(f"{uuid.uuid4().hex}{ext.lower()}", upload)
            paths.append(public_path(name))
    except Exception:
        delete_uploads(paths)
        raise
    return paths


def delete_upload(path: str) -> bool:
    """
    Remove a stored file given its public path (or bare file name).
    Missing files are logged, not raised.
    """
    if not path:
        return False

    name = os.path.basename(path)
    try:
        if default_storage.exists(name):
            default_storage.delete(name)
            logger.info(f"Deleted upload {name}")
            return True
        logger.warning(f"Upload not found for deletion: {name}")
    except OSError as e:
        logger.error(f"Upload deletion error for {name}: {e}")
    return False


def delete_uploads(paths: Iterable[str]) -> int:
    return sum(1 for path in paths if delete_upload(path))
