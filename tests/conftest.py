"""
Pytest fixtures for testing.

Provides a captured DisplayManager and mocked Azure Blob Storage objects so the
reporter can be exercised without a storage account.
"""

import io
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import HttpResponseError

from config import AuthMode, Config
from display import DisplayManager

LAST_MODIFIED = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)
SECRET = "abcdef1234567890"


def http_error(status_code, message="Request failed"):
    """HttpResponseError carrying the given status code."""
    error = HttpResponseError(message=message)
    error.status_code = status_code
    return error


def make_container(name, public_access=None):
    return SimpleNamespace(name=name, last_modified=LAST_MODIFIED, public_access=public_access)


def make_blob(name, size=1024, content_type="text/plain", blob_tier="Hot"):
    return SimpleNamespace(
        name=name,
        size=size,
        last_modified=LAST_MODIFIED,
        content_settings=SimpleNamespace(content_type=content_type),
        etag=f'"etag-{name}"',
        blob_tier=blob_tier,
    )


@pytest.fixture
def display():
    """DisplayManager writing to an in-memory stream, read back with display.stream.getvalue()."""
    return DisplayManager(stream=io.StringIO())


@pytest.fixture
def app_registration_config():
    return Config(
        tenant_id="11111111-2222-3333-4444-555555555555",
        client_id="66666666-7777-8888-9999-000000000000",
        client_secret=SECRET,
        storage_account_name="demostorage",
        container_name="documents",
    )


@pytest.fixture
def managed_identity_config():
    return Config(storage_account_name="demostorage", container_name="documents")


@pytest.fixture
def service_client():
    """
    Mocked BlobServiceClient.

    Configure containers with ``service_client.list_containers.return_value`` and
    blobs with ``service_client.blobs``; every list_blobs call returns a fresh iterator.
    """
    client = MagicMock()
    client.get_account_information.return_value = {
        "account_kind": "StorageV2",
        "sku_name": "Standard_LRS",
    }
    client.list_containers.return_value = [make_container("documents")]
    client.get_service_properties.return_value = {
        "target_version": "2021-08-06",
        "static_website": SimpleNamespace(enabled=False),
    }
    client.blobs = []

    container_client = MagicMock()
    container_client.list_blobs.side_effect = lambda *args, **kwargs: iter(client.blobs)
    container_client.get_container_properties.return_value = SimpleNamespace(
        last_modified=LAST_MODIFIED,
        etag='"0x8DC0000000000"',
        metadata={"owner": "lab"},
    )
    client.get_container_client.return_value = container_client
    client.container_client = container_client
    return client


@pytest.fixture(params=[AuthMode.APP_REGISTRATION, AuthMode.MANAGED_IDENTITY])
def mode(request):
    return request.param
