"""
Content classifier for the File Organizer domain.

Maps a file to a Category by sniffing magic bytes from a bounded prefix and
falling back to a case-insensitive extension table when the signature is
missing, unsupported or the file cannot be read.
"""

from pathlib import Path
from typing import NamedTuple, Optional

from loguru import logger

from autofile.models.exceptions import ClassificationError
from autofile.models.schemas import Category
from autofile.utils.helpers import get_file_extension

# Enough for every signature below, including tar's "ustar" at offset 257
PREFIX_SIZE = 8192


class Signature(NamedTuple):
    """Magic byte pattern at a fixed offset."""
    offset: int
    magic: bytes
    group: str
    label: str


# Order matters: more specific patterns come before shorter ones
SIGNATURES: tuple[Signature, ...] = (
    # Images
    Signature(0, b"\x89PNG\r\n\x1a\n", "image", "png"),
    Signature(0, b"\xff\xd8\xff", "image", "jpeg"),
    Signature(0, b"GIF87a", "image", "gif"),
    Signature(0, b"GIF89a", "image", "gif"),
    Signature(0, b"BM", "image", "bmp"),
    Signature(0, b"II*\x00", "image", "tiff"),
    Signature(0, b"MM\x00*", "image", "tiff"),
    Signature(0, b"\x00\x00\x01\x00", "image", "ico"),
    Signature(0, b"8BPS", "image", "psd"),
    Signature(0, b"\xff\x0a", "image", "jxl"),
    # Video
    Signature(0, b"\x1a\x45\xdf\xa3", "video", "matroska"),
    Signature(0, b"FLV\x01", "video", "flv"),
    Signature(0, b"\x00\x00\x01\xba", "video", "mpeg"),
    Signature(0, b"\x00\x00\x01\xb3", "video", "mpeg"),
    Signature(0, b"\x30\x26\xb2\x75\x8e\x66\xcf\x11", "video", "asf"),
    # Audio
    Signature(0, b"ID3", "audio", "mp3"),
    Signature(0, b"\xff\xfb", "audio", "mp3"),
    Signature(0, b"\xff\xf3", "audio", "mp3"),
    Signature(0, b"\xff\xf2", "audio", "mp3"),
    Signature(0, b"fLaC", "audio", "flac"),
    Signature(0, b"OggS", "audio", "ogg"),
    Signature(0, b"\xff\xf1", "audio", "aac"),
    Signature(0, b"\xff\xf9", "audio", "aac"),
    Signature(0, b"MThd", "audio", "midi"),
    Signature(0, b"#!AMR", "audio", "amr"),
    # Archives
    Signature(0, b"PK\x03\x04", "archive", "zip"),
    Signature(0, b"PK\x05\x06", "archive", "zip"),
    Signature(0, b"Rar!\x1a\x07", "archive", "rar"),
    Signature(0, b"7z\xbc\xaf\x27\x1c", "archive", "7z"),
    Signature(0, b"\x1f\x8b", "archive", "gzip"),
    Signature(0, b"BZh", "archive", "bz2"),
    Signature(0, b"\xfd7zXZ\x00", "archive", "xz"),
    Signature(0, b"\x28\xb5\x2f\xfd", "archive", "zstd"),
    Signature(257, b"ustar", "archive", "tar"),
    # Documents
    Signature(0, b"%PDF", "document", "pdf"),
    Signature(0, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "document", "ole2"),
    Signature(0, b"{\\rtf", "document", "rtf"),
    Signature(0, b"%!PS", "document", "postscript"),
    Signature(0, b"AT&TFORM", "document", "djvu"),
    # Fonts
    Signature(0, b"wOFF", "font", "woff"),
    Signature(0, b"wOF2", "font", "woff2"),
    Signature(0, b"\x00\x01\x00\x00\x00", "font", "ttf"),
    Signature(0, b"OTTO", "font", "otf"),
    # Recognised but not organizable: defer to the extension table
    Signature(0, b"\x7fELF", "other", "elf"),
    Signature(0, b"MZ", "other", "exe"),
    Signature(0, b"\xcf\xfa\xed\xfe", "other", "mach-o"),
    Signature(0, b"\x00asm", "other", "wasm"),
    Signature(0, b"SQLite format 3\x00", "other", "sqlite"),
)

GROUP_CATEGORIES = {
    "image": Category.IMAGE,
    "video": Category.VIDEO,
    "audio": Category.AUDIO,
    # Archives, documents and fonts share a destination
    "archive": Category.DOCUMENT,
    "document": Category.DOCUMENT,
    "font": Category.DOCUMENT,
}

# ISO base media file brands found after "ftyp"
FTYP_IMAGE_BRANDS = {b"heic", b"heix", b"hevc", b"heim", b"heis", b"mif1", b"msf1", b"avif", b"avis"}
FTYP_AUDIO_BRANDS = {b"M4A ", b"M4B ", b"M4P ", b"F4A ", b"F4B "}

EXTENSION_CATEGORIES: dict[str, Category] = {}


def _register(category: Category, extensions: str) -> None:
    for ext in extensions.split():
        EXTENSION_CATEGORIES[ext] = category


_register(Category.DOCUMENT, "pdf doc docx txt rtf odt ods odp xls xlsx ppt pptx csv epub")
_register(Category.IMAGE, "jpg jpeg png gif bmp svg webp ico tiff tif heic heif")
_register(Category.VIDEO, "mp4 avi mkv mov wmv flv webm m4v mpg mpeg")
_register(Category.AUDIO, "mp3 wav flac aac ogg m4a wma opus")
_register(Category.ARCHIVE, "zip rar 7z tar gz bz2 xz tgz")
_register(
    Category.CODE,
    "rs py js ts go java c cpp h hpp cs rb php swift kt scala r m sh bash zsh "
    "fish html css scss sass json xml yaml yml toml sql md rst tex",
)


def read_prefix(path: Path, size: int = PREFIX_SIZE) -> bytes:
    """
    Read at most ``size`` bytes from the start of ``path``.

    Raises:
        ClassificationError: if the file cannot be opened or read
    """
    try:
        with open(path, "rb") as handle:
            return handle.read(size)
    except OSError as e:
        raise ClassificationError(f"Cannot read {path}: {e}", path=path) from e


def _match_container(head: bytes) -> Optional[tuple[str, str]]:
    """Identify RIFF and ISO-BMFF containers by their sub-type."""
    if len(head) >= 12 and head[:4] == b"RIFF":
        form = head[8:12]
        if form == b"WAVE":
            return "audio", "wav"
        if form == b"AVI ":
            return "video", "avi"
        if form == b"WEBP":
            return "image", "webp"
        return None

    if len(head) >= 12 and head[4:8] == b"ftyp":
        brand = head[8:12]
        if brand in FTYP_IMAGE_BRANDS:
            return "image", brand.decode("latin-1").strip()
        if brand in FTYP_AUDIO_BRANDS:
            return "audio", "m4a"
        return "video", brand.decode("latin-1").strip() or "mp4"

    return None


def match_signature(head: bytes) -> Optional[tuple[str, str]]:
    """
    Match ``head`` against the signature table.

    Returns:
        (group, label) tuple or None when nothing matches
    """
    container = _match_container(head)
    if container is not None:
        return container

    for signature in SIGNATURES:
        end = signature.offset + len(signature.magic)
        if head[signature.offset:end] == signature.magic:
            return signature.group, signature.label

    return None


def detect_by_extension(path: Path) -> Category:
    """Classify ``path`` by its extension alone."""
    return EXTENSION_CATEGORIES.get(get_file_extension(path), Category.UNKNOWN)


def detect(path: Path) -> Category:
    """
    Classify a file by content, falling back to its extension.

    Never raises for unreadable files: IO errors degrade to the extension
    table.

    Args:
        path: File to classify

    Returns:
        Category of the file (Category.UNKNOWN when nothing matches)
    """
    path = Path(path)

    try:
        head = read_prefix(path)
    except ClassificationError as e:
        logger.warning(f"{e}; falling back to extension")
        return detect_by_extension(path)

    match = match_signature(head)
    if match is None:
        logger.debug(f"No known signature for {path.name}, falling back to extension")
        return detect_by_extension(path)

    group, label = match
    category = GROUP_CATEGORIES.get(group)
    if category is None:
        logger.debug(f"Signature '{label}' is not organizable, falling back to extension")
        return detect_by_extension(path)

    logger.info(f"Signature {label} | Categorized as: {category.value}")
    return category
