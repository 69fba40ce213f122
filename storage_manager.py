"""
Azure Blob Storage client lifecycle and single-blob operations.

This module owns the BlobServiceClient for a run and provides the upload and
download helpers used to demonstrate write access with the same credential.
"""

from contextlib import contextmanager
from typing import Optional

from azure.core.credentials import TokenCredential
from azure.storage.blob import BlobServiceClient

from config import Config
from credentials import create_service_client
from display import DisplayManager, format_size, format_timestamp


class StorageManager:
    """Manages the BlobServiceClient and blob transfers with proper resource cleanup."""

    def __init__(self, config: Config, credential: Optional[TokenCredential], display: DisplayManager):
        """Initialize storage manager with configuration, credential, and display handler."""
        self.config = config
        self.credential = credential
        self.display = display
        self._client: Optional[BlobServiceClient] = None

    @contextmanager
    def get_storage_client(self):
        """
        Context manager for BlobServiceClient with automatic cleanup.

        Yields:
            BlobServiceClient: Client authenticated with the run's credential

        Raises:
            ValueError: If credential is not set
        """
        if not self.credential:
            raise ValueError("Credential must be set before creating storage client")

        self._client = create_service_client(self.config, self.credential)
        self.display.print_success(f"Initialized BlobServiceClient for account: {self.config.storage_account_name}")
        try:
            yield self._client
        finally:
            self._client.close()
            self._client = None

    def upload_text(self, client: BlobServiceClient, container_name: str, blob_name: str, content: str) -> bool:
        """
        Upload text content to a blob, overwriting any existing blob.

        Returns:
            bool: True if the upload succeeded
        """
        try:
            blob_client = client.get_blob_client(container=container_name, blob=blob_name)
            result = blob_client.upload_blob(content.encode("utf-8"), overwrite=True)
        except Exception as e:
            self.display.print_error(f"Failed to upload blob: {e}")
            return False

        self.display.print_success(f"Successfully uploaded blob '{blob_name}' to container '{container_name}'")
        self.display.print_detail("ETag", result.get("etag"), indent=2)
        self.display.print_detail("Last Modified", format_timestamp(result.get("last_modified")), indent=2)
        return True

    def download_text(self, client: BlobServiceClient, container_name: str, blob_name: str) -> Optional[str]:
        """
        Download a blob and decode it as UTF-8 text, replacing undecodable bytes.

        Returns:
            Optional[str]: Blob content, or None if the download failed
        """
        try:
            blob_client = client.get_blob_client(container=container_name, blob=blob_name)
            downloader = blob_client.download_blob()
            data = downloader.readall()
        except Exception as e:
            self.display.print_error(f"Failed to download blob: {e}")
            return None

        content_settings = downloader.properties.content_settings
        self.display.print_success(f"Successfully downloaded blob '{blob_name}' from container '{container_name}'")
        self.display.print_detail("Size", format_size(len(data)), indent=2)
        self.display.print_detail("Content Type", content_settings.content_type if content_settings else None, indent=2)
        return data.decode("utf-8", errors="replace")
