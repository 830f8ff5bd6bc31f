import logging
from tempfile import SpooledTemporaryFile
from typing import Iterator

from fastapi import FastAPI, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, StreamingResponse

from src.object_gateway.storage import ObjectStorage, ObjectStream


logger = logging.getLogger(__name__)

# Routes do not check the method.
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# Upload bodies above this size spill from memory to a temporary file.
SPOOL_MAX_SIZE = 8 * 1024 * 1024

MISSING_KEY_DETAIL = "Missing 'key' query parameter"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _require_key(key: str | None) -> str:
    if not key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_KEY_DETAIL)
    return key


def _drain(stream: ObjectStream) -> Iterator[bytes]:
    try:
        yield from stream.iter_chunks()
    finally:
        stream.close()


def _key_lines(first_key: str, remaining: Iterator[str]) -> Iterator[str]:
    yield f"{first_key}\n"
    try:
        for key in remaining:
            yield f"{key}\n"
    except Exception as e:
        # The status line is already sent; the error becomes the last line.
        logger.error("Listing aborted after partial response: %s", e)
        yield f"{e}\n"


def create_app(storage: ObjectStorage) -> FastAPI:
    app = FastAPI(title="Object Gateway")

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.api_route("/upload", methods=ANY_METHOD, response_class=PlainTextResponse)
    async def upload_object(request: Request, key: str | None = None) -> PlainTextResponse:
        """Store the raw request body under ``key``."""
        object_key = _require_key(key)
        content_type = request.headers.get("content-type") or DEFAULT_CONTENT_TYPE

        # UploadFile moves writes to the thread pool once the spool is on disk.
        body = UploadFile(file=SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE))
        try:
            async for chunk in request.stream():
                await body.write(chunk)
            await body.seek(0)

            try:
                await run_in_threadpool(storage.put_object, object_key, body.file, content_type)
            except Exception as e:
                logger.warning("Upload of %s failed: %s", object_key, e)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Upload failed: {e}",
                )
        finally:
            await body.close()

        return PlainTextResponse(f"Uploaded {object_key} successfully\n")

    @app.api_route("/download", methods=ANY_METHOD)
    def download_object(key: str | None = None) -> StreamingResponse:
        """Stream the object stored under ``key`` back to the caller."""
        object_key = _require_key(key)

        try:
            stream = storage.get_object(object_key)
        except Exception as e:
            logger.warning("Download of %s failed: %s", object_key, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Download failed: {e}",
            )

        return StreamingResponse(
            _drain(stream),
            media_type=stream.content_type,
            headers={"Content-Disposition": "inline"},
        )

    @app.api_route("/list", methods=ANY_METHOD)
    def list_objects():
        """Write every key in the bucket, one per line, in backend order."""
        keys = iter(storage.list_keys())

        try:
            first_key = next(keys, None)
        except Exception as e:
            logger.warning("Listing %s failed: %s", storage.bucket, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e),
            )

        if first_key is None:
            return PlainTextResponse("")
        return StreamingResponse(_key_lines(first_key, keys), media_type="text/plain")

    return app
