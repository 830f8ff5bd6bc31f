"""Startup readiness: wait for the storage backend and make sure the bucket exists."""
import itertools
import logging
import time
from typing import Callable

from src.object_gateway.config import GatewayConfig, RetryPolicy
from src.object_gateway.minio_storage import MinioObjectStorage
from src.object_gateway.storage import ObjectStorage
from src.shared.exceptions import BucketProvisioningError, StorageUnavailableError


logger = logging.getLogger(__name__)

StorageFactory = Callable[[GatewayConfig], ObjectStorage]


def connect_with_retry(
    config: GatewayConfig,
    storage_factory: StorageFactory,
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[ObjectStorage, bool]:
    """
    Build a storage handle and probe the bucket until the backend answers.

    Building the client and asking whether the bucket exists are retried
    together: a failure in either means the backend is not ready yet.

    Args:
        config: Gateway configuration.
        storage_factory: Builds an ObjectStorage from the configuration.
        policy: Attempt bound and wait between attempts. With an unbounded
            policy this never returns if the backend never becomes reachable.
        sleep: Called with ``policy.interval_seconds`` between attempts.

    Returns:
        The storage handle and whether the bucket already exists.

    Raises:
        StorageUnavailableError: If every allowed attempt failed.
    """
    limit = "unlimited" if policy.is_unbounded else str(policy.max_attempts)
    attempts = itertools.count(1) if policy.is_unbounded else range(1, policy.max_attempts + 1)

    last_error: Exception | None = None
    for attempt in attempts:
        try:
            storage = storage_factory(config)
            exists = storage.bucket_exists()
        except Exception as e:
            last_error = e
            logger.warning(
                "Waiting for storage to be ready: %s (attempt %d/%s)", e, attempt, limit
            )
            if policy.max_attempts is not None and attempt >= policy.max_attempts:
                break
            logger.info("Retrying in %ss...", policy.interval_seconds)
            sleep(policy.interval_seconds)
            continue

        logger.info("Connected to storage at %s", config.endpoint)
        return storage, exists

    raise StorageUnavailableError(attempts=policy.max_attempts, last_error=last_error)


def ensure_bucket(storage: ObjectStorage, exists: bool) -> None:
    """Create the bucket if the probe found it missing. Never retried."""
    if exists:
        logger.info("Bucket already exists: %s", storage.bucket)
        return

    try:
        storage.create_bucket()
    except Exception as e:
        raise BucketProvisioningError(f"MakeBucket error for {storage.bucket}: {e}") from e
    logger.info("Created bucket: %s", storage.bucket)


def initialize_storage(
    config: GatewayConfig,
    storage_factory: StorageFactory = MinioObjectStorage.from_config,
    sleep: Callable[[float], None] = time.sleep,
) -> ObjectStorage:
    """Return a storage handle whose bucket is known to exist."""
    storage, exists = connect_with_retry(
        config,
        storage_factory=storage_factory,
        policy=config.retry,
        sleep=sleep,
    )
    ensure_bucket(storage, exists)
    return storage
