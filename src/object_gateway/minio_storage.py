import logging
from typing import BinaryIO, Iterator

from minio import Minio

from src.object_gateway.config import GatewayConfig


logger = logging.getLogger(__name__)

# MinIO needs a part size when the object length is unknown (min 5 MiB).
PART_SIZE = 10 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


class MinioObjectStream:
    """Wraps the urllib3 response returned by ``Minio.get_object``."""

    def __init__(self, response) -> None:
        self._response = response
        self._closed = False
        self.content_type = response.headers.get("Content-Type")

    def iter_chunks(self) -> Iterator[bytes]:
        yield from self._response.stream(CHUNK_SIZE)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._response.close()
        finally:
            self._response.release_conn()


class MinioObjectStorage:
    """ObjectStorage backed by a MinIO (or any S3-compatible) server."""

    def __init__(self, client: Minio, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "MinioObjectStorage":
        client = Minio(
            config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
        )
        return cls(client, config.bucket)

    def bucket_exists(self) -> bool:
        return self._client.bucket_exists(bucket_name=self.bucket)

    def create_bucket(self) -> None:
        self._client.make_bucket(bucket_name=self.bucket)

    def put_object(
        self,
        key: str,
        data: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> None:
        result = self._client.put_object(
            bucket_name=self.bucket,
            object_name=key,
            data=data,
            length=-1,
            part_size=PART_SIZE,
            content_type=content_type,
        )
        logger.debug("Stored %s/%s (etag=%s)", self.bucket, key, result.etag)

    def get_object(self, key: str) -> MinioObjectStream:
        response = self._client.get_object(bucket_name=self.bucket, object_name=key)
        return MinioObjectStream(response)

    def list_keys(self) -> Iterator[str]:
        for obj in self._client.list_objects(bucket_name=self.bucket, recursive=True):
            yield obj.object_name
