"""
Unit tests for storage error classification.
"""

import pytest
from azure.core.exceptions import ClientAuthenticationError, ServiceRequestError

from conftest import http_error
from errors import ErrorKind, StorageOperationError, classify, storage_call


class TestClassify:

    @pytest.mark.parametrize(
        "status_code, kind",
        [
            (401, ErrorKind.AUTHENTICATION_FAILED),
            (403, ErrorKind.PERMISSION_DENIED),
            (404, ErrorKind.ACCOUNT_NOT_FOUND),
            (500, ErrorKind.UNEXPECTED),
        ],
    )
    def test_status_codes(self, status_code, kind):
        assert classify(http_error(status_code)) is kind

    def test_credential_chain_failure_without_status(self):
        error = ClientAuthenticationError(message="ChainedTokenCredential failed to retrieve a token")
        assert classify(error) is ErrorKind.AUTHENTICATION_FAILED

    def test_transport_failure_is_unexpected(self):
        assert classify(ServiceRequestError(message="Name or service not known")) is ErrorKind.UNEXPECTED

    def test_non_azure_error_is_unexpected(self):
        assert classify(RuntimeError("boom")) is ErrorKind.UNEXPECTED


class TestStorageCall:

    def test_wraps_failure_with_kind_and_cause(self):
        cause = http_error(403, "This request is not authorized")

        with pytest.raises(StorageOperationError) as excinfo:
            with storage_call("List containers"):
                raise cause

        error = excinfo.value
        assert error.kind is ErrorKind.PERMISSION_DENIED
        assert error.operation == "List containers"
        assert error.cause is cause
        assert error.status_code == 403
        assert "List containers failed" in str(error)

    def test_successful_block_passes_through(self):
        with storage_call("Get account information"):
            result = 42
        assert result == 42
