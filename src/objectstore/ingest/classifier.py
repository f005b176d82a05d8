from enum import Enum


class FormatClass(Enum):
    CONVERTIBLE = "convertible"
    OPAQUE = "opaque"


# Extension -> Pillow decoder name
DECODERS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
}


def classify(extension: str) -> FormatClass:
    """Map an extension (with or without the leading dot) to its format class."""
    ext = (extension or "").lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    if ext in DECODERS:
        return FormatClass.CONVERTIBLE
    return FormatClass.OPAQUE
