import io

import pytest

from src.objectstore.errors import OversizedPayload, StorageError
from src.objectstore.ingest import BlobWriter, clamp


class FlakyStream(io.BytesIO):
    """Delivers the first chunk, then fails like a dropped connection."""

    def __init__(self, data: bytes, fail_after: int):
        super().__init__(data)
        self._fail_after = fail_after

    def read(self, size=-1):
        if self.tell() >= self._fail_after:
            raise ConnectionResetError("client went away")
        return super().read(min(size, self._fail_after) if size and size > 0 else self._fail_after)


def test_copies_bytes_verbatim(tmp_path):
    payload = bytes(range(256)) * 50
    dest = tmp_path / "blob.bin"

    written = BlobWriter(chunk_size=1000).write_verbatim(io.BytesIO(payload), dest)

    assert written == len(payload)
    assert dest.read_bytes() == payload


def test_rewinds_before_copying(tmp_path):
    stream = io.BytesIO(b"0123456789")
    stream.read(4)
    BlobWriter().write_verbatim(stream, tmp_path / "blob")
    assert (tmp_path / "blob").read_bytes() == b"0123456789"


def test_empty_payload_writes_empty_file(tmp_path):
    written = BlobWriter().write_verbatim(io.BytesIO(b""), tmp_path / "empty.png")
    assert written == 0
    assert (tmp_path / "empty.png").read_bytes() == b""


def test_disconnect_mid_copy_removes_partial_file(tmp_path):
    dest = tmp_path / "blob"
    with pytest.raises(StorageError) as exc_info:
        BlobWriter(chunk_size=4).write_verbatim(FlakyStream(b"x" * 32, fail_after=8), dest)
    assert isinstance(exc_info.value.cause, ConnectionResetError)
    assert not dest.exists()


def test_oversized_stream_removes_partial_file(tmp_path):
    dest = tmp_path / "blob"
    with pytest.raises(OversizedPayload):
        BlobWriter(chunk_size=4).write_verbatim(clamp(io.BytesIO(b"y" * 20), 10), dest)
    assert not dest.exists()


def test_existing_destination_is_not_overwritten(tmp_path):
    dest = tmp_path / "blob"
    dest.write_bytes(b"original")
    with pytest.raises(StorageError):
        BlobWriter().write_verbatim(io.BytesIO(b"new"), dest)
    assert dest.read_bytes() == b"original"


def test_missing_directory_is_storage_error(tmp_path):
    with pytest.raises(StorageError):
        BlobWriter().write_verbatim(io.BytesIO(b"data"), tmp_path / "nope" / "blob")
