"""
Azure Blob Storage connection report.

This module walks an authenticated BlobServiceClient through account verification,
container discovery, target container resolution, bounded blob listing and a pair of
optional advanced checks, printing a narrative report of each step.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from azure.storage.blob import BlobProperties, BlobServiceClient, ContainerProperties

from config import AuthMode, Config
from display import DisplayManager, format_size, format_timestamp
from errors import ErrorKind, StorageOperationError, storage_call

BLOB_DISPLAY_LIMIT = 5
DOCUMENTATION_HINT = "For troubleshooting help, see the README.md file."


class ReportState(Enum):
    INIT = "init"
    ACCOUNT_VERIFIED = "account_verified"
    CONTAINERS_LISTED = "containers_listed"
    CONTAINER_RESOLVED = "container_resolved"
    BLOBS_LISTED = "blobs_listed"
    ADVANCED_CHECKED = "advanced_checked"
    DONE = "done"
    ERRORED = "errored"


@dataclass(frozen=True)
class ContainerSummary:
    name: str
    last_modified: Optional[datetime]
    public_access: Optional[str]

    @classmethod
    def from_properties(cls, properties: ContainerProperties) -> "ContainerSummary":
        return cls(
            name=properties.name,
            last_modified=properties.last_modified,
            public_access=properties.public_access,
        )


@dataclass(frozen=True)
class BlobSummary:
    name: str
    size_bytes: int
    last_modified: Optional[datetime]
    content_type: Optional[str]
    etag: Optional[str]
    access_tier: Optional[str] = None

    @classmethod
    def from_properties(cls, properties: BlobProperties) -> "BlobSummary":
        content_settings = properties.content_settings
        return cls(
            name=properties.name,
            size_bytes=max(0, properties.size or 0),
            last_modified=properties.last_modified,
            content_type=content_settings.content_type if content_settings else None,
            etag=properties.etag,
            access_tier=properties.blob_tier,
        )


@dataclass
class RunReport:
    """Counters and outcome of one reporter run."""
    requested_container: str
    state: ReportState = ReportState.INIT
    error_kind: Optional[ErrorKind] = None
    account_kind: Optional[str] = None
    sku_name: Optional[str] = None
    containers_found: int = 0
    resolved_container: Optional[str] = None
    fallback_used: bool = False
    blobs_listed: int = 0
    blobs_remaining: int = 0
    total_size_bytes: int = 0
    truncated: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.state is ReportState.ERRORED else 0


def resolve_container(containers: List[ContainerSummary], requested: str) -> Optional[ContainerSummary]:
    """Pick the requested container, or the first listed one when it does not exist."""
    for container in containers:
        if container.name == requested:
            return container
    return containers[0] if containers else None


class StorageReporter:
    """Runs the connection report against an authenticated storage account."""

    def __init__(
        self,
        client: BlobServiceClient,
        config: Config,
        mode: AuthMode,
        display: DisplayManager,
        blob_display_limit: int = BLOB_DISPLAY_LIMIT,
    ):
        self.client = client
        self.config = config
        self.mode = mode
        self.display = display
        self.blob_display_limit = blob_display_limit
        self.report = RunReport(requested_container=config.container_name)

    def _transition(self, state: ReportState) -> None:
        logging.debug(f"Report state {self.report.state.name} -> {state.name}")
        self.report.state = state

    def run(self) -> RunReport:
        """
        Execute every report step in order.

        Returns:
            RunReport: Final state and counters. The state is ERRORED when a
            fatal storage error occurred, DONE otherwise.
        """
        self.display.print_plain(f"\n--- Testing {self.mode.label} Connection ---")
        try:
            self.verify_account()
            containers = self.list_containers()
            if not containers:
                self._transition(ReportState.DONE)
                return self.report

            target = self.resolve_target_container(containers)
            self.list_blobs(target.name)
            self.check_advanced_operations(target.name)
        except StorageOperationError as e:
            self._transition(ReportState.ERRORED)
            self.report.error_kind = e.kind
            self.report_failure(e)
            return self.report

        self._transition(ReportState.DONE)
        self.display.print_success("All tests completed successfully!")
        self.display.print_plain(
            f"\n💡 Your {self.mode.label} is properly configured for Azure Blob Storage access."
        )
        return self.report

    def verify_account(self) -> None:
        self.display.print_section("1. Getting storage account information...")
        with storage_call("Get account information"):
            account_info = self.client.get_account_information()

        self.report.account_kind = account_info.get("account_kind")
        self.report.sku_name = account_info.get("sku_name")
        self.display.print_plain(f"   ✓ Authenticated with {self.mode.label}")
        self.display.print_detail("Account Kind", self.report.account_kind)
        self.display.print_detail("SKU Name", self.report.sku_name)
        self._transition(ReportState.ACCOUNT_VERIFIED)

    def list_containers(self) -> List[ContainerSummary]:
        """
        List every container of the account in the order the service returns them.

        Returns:
            List[ContainerSummary]: Listed containers, possibly empty
        """
        self.display.print_section("2. Listing containers...")
        containers = []
        with storage_call("List containers"):
            for properties in self.client.list_containers():
                container = ContainerSummary.from_properties(properties)
                containers.append(container)
                self.display.print_plain(f"   - {container.name}")
                self.display.print_detail("Last Modified", format_timestamp(container.last_modified), indent=5)
                self.display.print_detail("Public Access", container.public_access or "none", indent=5)

        self.report.containers_found = len(containers)
        self._transition(ReportState.CONTAINERS_LISTED)

        if not containers:
            self.display.print_plain("   No containers found in the storage account.")
            self.display.print_plain(f"   Note: The {self.mode.label} might not have sufficient permissions.")
        else:
            self.display.print_plain(f"   Total containers: {len(containers)}")
        return containers

    def resolve_target_container(self, containers: List[ContainerSummary]) -> ContainerSummary:
        requested = self.config.container_name
        target = resolve_container(containers, requested)

        if target.name == requested:
            self.display.print_section(f"3. Using specified container '{requested}'...")
        else:
            self.report.fallback_used = True
            self.display.print_section(f"3. Container '{requested}' not found.")
            self.display.print_warning(f"Using first available container '{target.name}' instead of '{requested}'")
            logging.info(f"Container {requested} not found, falling back to {target.name}")

        self.report.resolved_container = target.name
        self._transition(ReportState.CONTAINER_RESOLVED)
        return target

    def list_blobs(self, container_name: str) -> None:
        """
        Show blob details up to the display limit, then count what is left.

        When the limit is reached the container is enumerated a second time
        to get the exact number of remaining blobs.
        """
        self.display.print_section(f"4. Listing blobs in container '{container_name}'...")
        container_client = self.client.get_container_client(container_name)

        with storage_call(f"List blobs in container '{container_name}'"):
            for properties in container_client.list_blobs(include=["metadata"]):
                blob = BlobSummary.from_properties(properties)
                self.report.blobs_listed += 1
                self.report.total_size_bytes += blob.size_bytes
                self._print_blob(blob)

                if self.report.blobs_listed >= self.blob_display_limit:
                    total = self._count_blobs(container_client.list_blobs())
                    self.report.blobs_remaining = max(0, total - self.report.blobs_listed)
                    if self.report.blobs_remaining > 0:
                        self.report.truncated = True
                        self.display.print_plain(f"   ... and {self.report.blobs_remaining} more blobs")
                    break

        if self.report.blobs_listed == 0:
            self.display.print_plain("   No blobs found in the container.")
        else:
            suffix = "+" if self.report.truncated else ""
            self.display.print_plain(
                f"   📊 Summary: {self.report.blobs_listed}{suffix} blobs, "
                f"Total size: {format_size(self.report.total_size_bytes)}"
            )
        self._transition(ReportState.BLOBS_LISTED)

    @staticmethod
    def _count_blobs(blobs: Iterable) -> int:
        return sum(1 for _ in blobs)

    def _print_blob(self, blob: BlobSummary) -> None:
        self.display.print_plain(f"   📄 {blob.name}")
        self.display.print_detail("Size", format_size(blob.size_bytes), indent=6)
        self.display.print_detail("Last Modified", format_timestamp(blob.last_modified), indent=6)
        self.display.print_detail("Content Type", blob.content_type, indent=6)
        self.display.print_detail("ETag", blob.etag, indent=6)
        if blob.access_tier:
            self.display.print_detail("Access Tier", blob.access_tier, indent=6)
        self.display.print_plain()

    def check_advanced_operations(self, container_name: str) -> None:
        """Container and service properties. Failures here only produce warnings."""
        self.display.print_section("5. Testing advanced operations...")
        self._check_container_properties(container_name)
        self._check_service_properties()
        self._transition(ReportState.ADVANCED_CHECKED)

    def _warn(self, message: str) -> None:
        self.report.warnings.append(message)
        self.display.print_warning(message)

    def _check_container_properties(self, container_name: str) -> None:
        try:
            with storage_call(f"Get properties of container '{container_name}'"):
                properties = self.client.get_container_client(container_name).get_container_properties()
        except StorageOperationError as e:
            if e.kind is ErrorKind.PERMISSION_DENIED:
                self._warn("Container properties not accessible (insufficient permissions)")
            else:
                self._warn(f"Container properties check failed: {e.cause}")
            return

        self.display.print_plain("   ✓ Container properties retrieved")
        self.display.print_detail("Last Modified", format_timestamp(properties.last_modified), indent=5)
        self.display.print_detail("ETag", properties.etag, indent=5)
        if properties.metadata:
            self.display.print_detail("Metadata", f"{len(properties.metadata)} items", indent=5)

    def _check_service_properties(self) -> None:
        try:
            with storage_call("Get service properties"):
                properties = self.client.get_service_properties()
        except StorageOperationError as e:
            if e.kind is ErrorKind.PERMISSION_DENIED:
                self._warn("Service properties not accessible (insufficient permissions)")
            else:
                self._warn(f"Service properties check failed: {e.cause}")
            return

        self.display.print_plain("   ✓ Storage service properties accessible")
        self.display.print_detail("Default Service Version", properties.get("target_version"), indent=5)
        static_website = properties.get("static_website")
        if static_website is not None:
            self.display.print_detail(
                "Static Website", "Enabled" if static_website.enabled else "Disabled", indent=5
            )

    def report_failure(self, error: StorageOperationError) -> None:
        """Print operator guidance for a fatal storage error. Never prints the client secret."""
        logging.error(str(error))
        account = self.config.storage_account_name

        if error.kind is ErrorKind.AUTHENTICATION_FAILED:
            self.display.print_error(f"Authentication failed. Please verify your {self.mode.label} credentials:")
            self._print_identity()
            if self.mode is AuthMode.APP_REGISTRATION:
                self.display.print_plain("   - Client Secret: [Check if valid and not expired]")
            else:
                self.display.print_plain("   - Run on an Azure resource with a managed identity, or sign in with 'az login'")
        elif error.kind is ErrorKind.PERMISSION_DENIED:
            self.display.print_error(f"Access denied. Please ensure your {self.mode.label} has appropriate permissions:")
            self.display.print_plain("   - Storage Blob Data Reader (minimum for read operations)")
            self.display.print_plain("   - Storage Blob Data Contributor (for write operations)")
            self.display.print_plain("   - Or custom role with required permissions")
        elif error.kind is ErrorKind.ACCOUNT_NOT_FOUND:
            self.display.print_error(f"Storage account '{account}' not found or not accessible.")
            self.display.print_plain("   Please verify:")
            self.display.print_plain("   - Storage account name is correct")
            self.display.print_plain("   - Storage account exists in the correct subscription")
            self.display.print_plain("   - Network access rules allow access")
        else:
            self.display.print_error(f"Unexpected error occurred during {error.operation}: {error.cause}")
            self.display.print_plain("\nDebugging information:")
            self.display.print_detail("Storage Account URI", self.config.account_url)
            self._print_identity()
            self.display.print_plain(f"\n{DOCUMENTATION_HINT}")
            return

        self.display.print_plain(f"   Error: {error.cause}")
        self.display.print_plain(f"\n{DOCUMENTATION_HINT}")

    def _print_identity(self) -> None:
        if self.mode is AuthMode.APP_REGISTRATION:
            self.display.print_plain(f"   - Tenant ID: {self.config.tenant_id}")
            self.display.print_plain(f"   - Client ID: {self.config.client_id}")
        else:
            self.display.print_plain("   - Authentication: Managed Identity credential chain")
