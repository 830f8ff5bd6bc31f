from typing import BinaryIO, Iterator, Protocol


class ObjectStream(Protocol):
    """An open object body being read from storage."""

    content_type: str | None

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the object content until exhausted."""
        ...

    def close(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
        ...


class ObjectStorage(Protocol):
    """Abstract interface for a single bucket in object storage (MinIO, S3, etc.)."""

    bucket: str

    def bucket_exists(self) -> bool:
        ...

    def create_bucket(self) -> None:
        ...

    def put_object(
        self,
        key: str,
        data: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> None:
        """Upload an object of unknown length.

        Args:
            key: Object key (path within bucket).
            data: Readable binary stream, read until EOF.
            content_type: Stored with the object and returned on download.
        """
        ...

    def get_object(self, key: str) -> ObjectStream:
        """Open an object for reading. Raises if the key does not exist."""
        ...

    def list_keys(self) -> Iterator[str]:
        """Yield every key in the bucket, descending into prefixes.

        Errors may be raised lazily, while iterating.
        """
        ...
