import io

import pytest
from PIL import Image

from src.objectstore.errors import DecodeError, EncodeError, StorageError
from src.objectstore.ingest import ImageTranscoder
from tests.helpers import make_image_bytes, requires_webp


@pytest.fixture
def transcoder():
    return ImageTranscoder()


@requires_webp
class TestTranscode:
    def test_png_becomes_decodable_webp(self, transcoder, tmp_path):
        dest = tmp_path / "out.webp"
        written = transcoder.transcode(io.BytesIO(make_image_bytes("PNG")), ".png", dest, 80)

        assert written == dest.stat().st_size
        assert written > 0
        with Image.open(dest) as img:
            assert img.format == "WEBP"
            assert img.size == (10, 10)

    def test_jpeg_and_gif_are_decoded(self, transcoder, tmp_path):
        for ext, fmt in ((".jpg", "JPEG"), (".jpeg", "JPEG"), (".gif", "GIF")):
            dest = tmp_path / f"out{ext}.webp"
            transcoder.transcode(io.BytesIO(make_image_bytes(fmt, size=(7, 5))), ext, dest, 80)
            with Image.open(dest) as img:
                assert img.size == (7, 5)

    def test_alpha_is_preserved(self, transcoder, tmp_path):
        dest = tmp_path / "alpha.webp"
        data = make_image_bytes("PNG", mode="RGBA", color=(0, 0, 255, 0))
        transcoder.transcode(io.BytesIO(data), ".png", dest, 80)
        with Image.open(dest) as img:
            assert img.mode == "RGBA"

    def test_rewinds_partially_consumed_stream(self, transcoder, tmp_path):
        stream = io.BytesIO(make_image_bytes("PNG"))
        stream.read(20)
        transcoder.transcode(stream, ".png", tmp_path / "out.webp", 80)
        assert (tmp_path / "out.webp").exists()

    def test_source_stream_stays_open(self, transcoder, tmp_path):
        stream = io.BytesIO(make_image_bytes("GIF"))
        transcoder.transcode(stream, ".gif", tmp_path / "out.webp", 80)
        assert not stream.closed

    def test_lower_quality_gives_smaller_file(self, transcoder, tmp_path):
        noisy = Image.effect_noise((64, 64), 80).convert("RGB")
        buf = io.BytesIO()
        noisy.save(buf, format="PNG")
        data = buf.getvalue()

        low = transcoder.transcode(io.BytesIO(data), ".png", tmp_path / "low.webp", 10)
        high = transcoder.transcode(io.BytesIO(data), ".png", tmp_path / "high.webp", 95)
        assert low < high


class TestTranscodeFailures:
    def test_garbage_png_is_decode_error(self, transcoder, tmp_path):
        dest = tmp_path / "out.webp"
        with pytest.raises(DecodeError) as exc_info:
            transcoder.transcode(io.BytesIO(b"\x89PNG\r\n\x1a\nnot really"), ".png", dest, 80)
        assert exc_info.value.reason == "decode_error"
        assert exc_info.value.cause is not None
        assert not dest.exists()

    def test_truncated_png_is_decode_error(self, transcoder, tmp_path):
        data = make_image_bytes("PNG", size=(32, 32))
        with pytest.raises(DecodeError):
            transcoder.transcode(io.BytesIO(data[: len(data) // 2]), ".png", tmp_path / "out.webp", 80)
        assert not (tmp_path / "out.webp").exists()

    def test_empty_payload_is_decode_error(self, transcoder, tmp_path):
        with pytest.raises(DecodeError):
            transcoder.transcode(io.BytesIO(b""), ".png", tmp_path / "out.webp", 80)

    def test_jpeg_bytes_under_png_extension_is_decode_error(self, transcoder, tmp_path):
        with pytest.raises(DecodeError):
            transcoder.transcode(io.BytesIO(make_image_bytes("JPEG")), ".png", tmp_path / "out.webp", 80)

    def test_unsupported_extension_is_decode_error(self, transcoder, tmp_path):
        with pytest.raises(DecodeError, match="unsupported format"):
            transcoder.transcode(io.BytesIO(make_image_bytes("BMP")), ".bmp", tmp_path / "out.webp", 80)

    def test_existing_destination_is_storage_error(self, transcoder, tmp_path):
        dest = tmp_path / "taken.webp"
        dest.write_bytes(b"already here")
        with pytest.raises(StorageError):
            transcoder.transcode(io.BytesIO(make_image_bytes("PNG")), ".png", dest, 80)
        assert dest.read_bytes() == b"already here"

    def test_encode_failure_removes_partial_output(self, transcoder, tmp_path, monkeypatch):
        def broken_save(self, fp, *args, **kwargs):
            fp.write(b"partial")
            raise OSError("encoder exploded")

        monkeypatch.setattr(Image.Image, "save", broken_save)
        dest = tmp_path / "out.webp"
        with pytest.raises(EncodeError) as exc_info:
            transcoder.transcode(io.BytesIO(make_image_bytes("PNG")), ".png", dest, 80)
        assert exc_info.value.reason == "encode_error"
        assert not dest.exists()
