import pytest
from fastapi.testclient import TestClient

from src.object_gateway.app import create_app
from src.object_gateway.config import GatewayConfig, RetryPolicy
from tests.conftest import FakeObjectStorage


@pytest.fixture
def client(fake_storage: FakeObjectStorage) -> TestClient:
    """Create FastAPI test client with injected fake storage."""
    app = create_app(storage=fake_storage)
    return TestClient(app)


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        endpoint="minio:9000",
        access_key="minioadmin",
        secret_key="minioadmin",
        bucket="test-bucket",
        retry=RetryPolicy(max_attempts=10, interval_seconds=2.0),
    )
