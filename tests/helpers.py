import io

import pytest
from PIL import Image, features

requires_webp = pytest.mark.skipif(
    not features.check("webp"), reason="Pillow built without WebP support"
)


def make_image_bytes(fmt: str = "PNG", size=(10, 10), mode: str = "RGB", color="red") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color=color).save(buf, format=fmt)
    return buf.getvalue()


class OneShotStream:
    """A byte source that can only be read forward, like a raw socket body."""

    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)

    def read(self, size=-1):
        return self._buf.read(size)

    def seekable(self):
        return False
