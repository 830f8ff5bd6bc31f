from typing import BinaryIO, Iterator, Optional

import pytest


class FakeObjectStream:
    """Fake ObjectStream that yields content in small chunks and records close()."""
    def __init__(
        self,
        content: bytes,
        chunk_size: int = 4,
        content_type: Optional[str] = "application/octet-stream",
    ) -> None:
        self._content = content
        self.content_type = content_type
        self._chunk_size = chunk_size
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def iter_chunks(self) -> Iterator[bytes]:
        for start in range(0, len(self._content), self._chunk_size):
            yield self._content[start:start + self._chunk_size]

    def close(self) -> None:
        self.close_calls += 1


class FakeObjectStorage:
    """Global in-memory fake for a single bucket."""
    def __init__(self, bucket: str = "test-bucket", bucket_exists: bool = True) -> None:
        self.bucket = bucket
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.exists = bucket_exists
        self.create_calls = 0
        self.put_calls: list[str] = []
        self.get_calls: list[str] = []
        self.opened_streams: list[FakeObjectStream] = []
        self.list_error_after: Optional[int] = None

    def bucket_exists(self) -> bool:
        return self.exists

    def create_bucket(self) -> None:
        self.create_calls += 1
        self.exists = True

    def put_object(
        self,
        key: str,
        data: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> None:
        self.put_calls.append(key)
        self.objects[key] = data.read()
        self.content_types[key] = content_type

    def get_object(self, key: str) -> FakeObjectStream:
        self.get_calls.append(key)
        if key not in self.objects:
            raise LookupError(f"The specified key does not exist: {key}")
        stream = FakeObjectStream(
            self.objects[key],
            content_type=self.content_types.get(key, "application/octet-stream"),
        )
        self.opened_streams.append(stream)
        return stream

    def list_keys(self) -> Iterator[str]:
        for index, key in enumerate(list(self.objects)):
            if self.list_error_after is not None and index >= self.list_error_after:
                raise ConnectionError("listing interrupted")
            yield key


@pytest.fixture
def fake_storage() -> FakeObjectStorage:
    """Global fixture for FakeObjectStorage."""
    return FakeObjectStorage()
