"""
Drive image collector

Lists a folder through the drive backend and returns every image file as a
base64 payload. The backend is duck-typed (see
google_services.GoogleDriveBackend):

    backend.get_folder_by_id(folder_id) -> folder
    folder.get_files() -> iterable of files with .id, .mime_type, .get_bytes()
"""
import base64
import logging
from typing import List, Optional

from portfolio_api.exceptions import FolderNotResolvedError
from portfolio_api.models import ImageRecord

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = frozenset({
    'image/png',
    'image/jpeg',
    'image/gif',
    'image/webp',
    'image/svg+xml',
})


def is_image_mime_type(mime_type: Optional[str]) -> bool:
    return mime_type in IMAGE_MIME_TYPES


def collect_images(backend, folder_id: Optional[str]) -> List[ImageRecord]:
    """
    Collect all image files in a Drive folder

    Non-image files are skipped. Order follows the folder listing.

    Raises:
        FolderNotResolvedError: folder id is unset or does not resolve to a folder
    """
    if not folder_id:
        raise FolderNotResolvedError("DRIVE_FOLDER_ID is not set")

    folder = backend.get_folder_by_id(folder_id)
    images = []
    skipped = 0
    for file in folder.get_files():
        if not is_image_mime_type(file.mime_type):
            skipped += 1
            continue
        data = base64.b64encode(file.get_bytes()).decode('ascii')
        images.append(ImageRecord(name=file.id, mime_type=file.mime_type, data=data))

    logger.info(f"[IMAGES] Collected {len(images)} images from folder {folder_id} ({skipped} non-image files skipped)")
    return images
