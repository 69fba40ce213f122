"""
Azure credential management for both authentication modes.

Managed Identity uses a ChainedTokenCredential with a fixed fallback order, App
Registration uses a ClientSecretCredential with no fallback. Neither credential
touches the network until the storage client first asks for a token.
"""

import logging

from azure.core.credentials import TokenCredential
from azure.core.pipeline.policies import RetryMode
from azure.identity import (
    AzureCliCredential,
    ChainedTokenCredential,
    ClientSecretCredential,
    EnvironmentCredential,
    ManagedIdentityCredential,
    VisualStudioCodeCredential,
)
from azure.storage.blob import BlobServiceClient, LinearRetry

from config import AuthMode, Config

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 2

# Passed to every credential that talks to an identity endpoint
RETRY_OPTIONS = {
    "retry_total": MAX_RETRIES,
    "retry_mode": RetryMode.Fixed,
    "retry_backoff_factor": RETRY_DELAY_SECONDS,
}


class CredentialFactory:
    """Builds the credential for the configured authentication mode."""

    def __init__(self, config: Config, mode: AuthMode):
        self.config = config
        self.mode = mode

    def build(self) -> TokenCredential:
        """
        Get the Azure credential for the configured mode.

        Returns:
            TokenCredential: Credential used by the blob service client

        Raises:
            ValueError: If App Registration values are missing
        """
        if self.mode is AuthMode.MANAGED_IDENTITY:
            return self._get_chained_credential()
        return self._get_client_secret_credential()

    def _get_chained_credential(self) -> ChainedTokenCredential:
        """Credential chain tried in order: environment, managed identity, Azure CLI, VS Code."""
        logging.info("Using managed identity credential chain")
        return ChainedTokenCredential(
            # Service principal via environment variables
            EnvironmentCredential(**RETRY_OPTIONS),
            # For Azure-hosted scenarios
            ManagedIdentityCredential(**RETRY_OPTIONS),
            # Local development
            AzureCliCredential(),
            VisualStudioCodeCredential(),
        )

    def _get_client_secret_credential(self) -> ClientSecretCredential:
        if not all([self.config.tenant_id, self.config.client_id, self.config.client_secret]):
            raise ValueError("Tenant ID, client ID and client secret are required for App Registration")

        logging.debug(f"Using client secret credential for client {self.config.client_id}")
        return ClientSecretCredential(
            tenant_id=self.config.tenant_id,
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            **RETRY_OPTIONS,
        )


def create_service_client(config: Config, credential: TokenCredential) -> BlobServiceClient:
    """Create a BlobServiceClient for the configured account with the demo retry policy."""
    return BlobServiceClient(
        account_url=config.account_url,
        credential=credential,
        retry_policy=LinearRetry(
            backoff=RETRY_DELAY_SECONDS,
            retry_total=MAX_RETRIES,
            random_jitter_range=0,
        ),
    )
