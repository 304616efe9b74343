"""
Rename camera-style image files to their capture timestamp.

``IMG_4031.JPG`` carries nothing the subfolder matcher can use; the EXIF
capture time at least groups shots by date. Images without a capture time
keep their name.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger
from PIL import Image, UnidentifiedImageError

from domains.file_organizer.mover import resolve_conflict

CAMERA_NAME_RE = re.compile(
    r"^(IMG|DSC|DSCN|DSCF|DCIM|PXL|MVIMG|P)[_-]?\d[\d_-]*(?:\.\w+)?$",
    re.IGNORECASE,
)
RENAMEABLE_EXTENSIONS = {".jpg", ".jpeg", ".tif", ".tiff", ".png", ".heic", ".heif", ".webp"}

EXIF_IFD = 0x8769
TAG_DATETIME = 0x0132
TAG_DATETIME_ORIGINAL = 0x9003
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
NAME_DATE_FORMAT = "%Y-%m-%d_%H-%M-%S"


def read_capture_time(path: Path) -> Optional[datetime]:
    """Return the EXIF capture time of ``path`` or None."""
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            raw = exif.get_ifd(EXIF_IFD).get(TAG_DATETIME_ORIGINAL) or exif.get(TAG_DATETIME)
    except (OSError, UnidentifiedImageError) as e:
        logger.debug(f"Cannot read EXIF from {path.name}: {e}")
        return None

    if not raw:
        return None

    try:
        return datetime.strptime(str(raw).strip("\x00 "), EXIF_DATE_FORMAT)
    except ValueError:
        logger.debug(f"Unparseable EXIF date {raw!r} in {path.name}")
        return None


class ImageRenamer:
    """Preprocessor that renames generic camera file names."""

    name = "Camera Image Renamer"

    def should_process(self, path: Path) -> bool:
        return (
            path.suffix.lower() in RENAMEABLE_EXTENSIONS
            and CAMERA_NAME_RE.match(path.stem) is not None
        )

    def process(self, path: Path) -> Path:
        captured = read_capture_time(path)
        if captured is None:
            logger.debug(f"No capture time for {path.name}, keeping name")
            return path

        target = resolve_conflict(path.with_name(captured.strftime(NAME_DATE_FORMAT) + path.suffix.lower()))
        path.rename(target)
        logger.info(f"Renamed {path.name} -> {target.name}")
        return target
