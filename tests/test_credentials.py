"""
Unit tests for CredentialFactory and the blob service client factory.
"""

import logging
from unittest.mock import Mock, call, patch

import pytest
from azure.core.pipeline.policies import RetryMode

from config import AuthMode, Config
from credentials import CredentialFactory, create_service_client


class TestCredentialFactory:

    @patch("credentials.VisualStudioCodeCredential")
    @patch("credentials.AzureCliCredential")
    @patch("credentials.ManagedIdentityCredential")
    @patch("credentials.EnvironmentCredential")
    @patch("credentials.ChainedTokenCredential")
    def test_managed_identity_chain_order(self, mock_chain, mock_env, mock_mi, mock_cli, mock_vscode,
                                          managed_identity_config):
        """Environment, managed identity, Azure CLI and VS Code are tried in that order."""
        credential = CredentialFactory(managed_identity_config, AuthMode.MANAGED_IDENTITY).build()

        assert credential == mock_chain.return_value
        mock_chain.assert_called_once_with(
            mock_env.return_value,
            mock_mi.return_value,
            mock_cli.return_value,
            mock_vscode.return_value,
        )
        assert mock_mi.call_args == call(retry_total=3, retry_mode=RetryMode.Fixed, retry_backoff_factor=2)

    @patch("credentials.ChainedTokenCredential")
    @patch("credentials.ClientSecretCredential")
    def test_app_registration_uses_client_secret_only(self, mock_secret_credential, mock_chain,
                                                      app_registration_config):
        credential = CredentialFactory(app_registration_config, AuthMode.APP_REGISTRATION).build()

        assert credential == mock_secret_credential.return_value
        mock_secret_credential.assert_called_once_with(
            tenant_id=app_registration_config.tenant_id,
            client_id=app_registration_config.client_id,
            client_secret=app_registration_config.client_secret,
            retry_total=3,
            retry_mode=RetryMode.Fixed,
            retry_backoff_factor=2,
        )
        mock_chain.assert_not_called()

    @patch("credentials.ClientSecretCredential")
    def test_client_id_not_logged_at_info(self, mock_secret_credential, app_registration_config, caplog):
        caplog.set_level(logging.INFO)

        CredentialFactory(app_registration_config, AuthMode.APP_REGISTRATION).build()

        assert app_registration_config.client_id not in caplog.text

    @patch("credentials.ClientSecretCredential")
    def test_app_registration_without_secret(self, mock_secret_credential):
        config = Config(tenant_id="tenant", client_id="client", storage_account_name="demostorage")

        with pytest.raises(ValueError, match="client secret"):
            CredentialFactory(config, AuthMode.APP_REGISTRATION).build()
        mock_secret_credential.assert_not_called()


@patch("credentials.BlobServiceClient")
def test_create_service_client(mock_blob_service, managed_identity_config):
    credential = Mock()

    client = create_service_client(managed_identity_config, credential)

    assert client == mock_blob_service.return_value
    kwargs = mock_blob_service.call_args.kwargs
    assert kwargs["account_url"] == "https://demostorage.blob.core.windows.net"
    assert kwargs["credential"] is credential
    assert kwargs["retry_policy"].backoff == 2
    assert kwargs["retry_policy"].total_retries == 3
