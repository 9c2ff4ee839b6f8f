"""Shared fixtures for the inventory service tests."""
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from inventory_service.api_server import create_app
from inventory_service.blob_store import BlobStore
from inventory_service.repository import ItemRepository
from inventory_service.service import InventoryService


@pytest.fixture
def cache_dir():
    """Create a temporary photo cache directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def blobs(cache_dir):
    return BlobStore(cache_dir)


@pytest.fixture
def repository():
    return ItemRepository()


@pytest.fixture
def service(repository, blobs):
    return InventoryService(repository, blobs)


@pytest.fixture
def client(cache_dir):
    """A test client for an app storing photos in the temporary cache directory."""
    with TestClient(create_app(cache_dir)) as test_client:
        yield test_client
