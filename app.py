"""
Main Azure Storage Application orchestrator.

This module provides the main application class that coordinates all components
and manages the overall workflow for one authentication mode, plus the command-line
entry points for the Managed Identity and App Registration demos.
"""

import argparse
import logging
import sys
from typing import List, Mapping, Optional, Sequence

from config import (
    AuthMode,
    configuration_help,
    describe_environment,
    is_valid,
    load_config,
    load_environment,
    missing_fields,
)
from credentials import CredentialFactory
from display import DisplayManager
from stg_logger import setup_logging
from storage_manager import StorageManager
from storage_reporter import DOCUMENTATION_HINT, StorageReporter


class AzureStorageApplication:
    """Main application class that orchestrates Azure Storage operations."""

    def __init__(
        self,
        mode: AuthMode,
        argv: Optional[Sequence[str]] = None,
        env: Optional[Mapping[str, str]] = None,
        options: Optional[argparse.Namespace] = None,
        display: Optional[DisplayManager] = None,
    ):
        """Initialize the application with all necessary components."""
        self.mode = mode
        self.display = display or DisplayManager()
        self.options = options or argparse.Namespace(upload_blob=None, upload_content="", download_blob=None)
        self.config = load_config(mode, env=env, argv=argv)

    def run(self) -> int:
        """
        Execute the main application workflow.

        Returns:
            int: Process exit code, 0 on success and 1 on any failure
        """
        self.display.print_banner(f"Azure Blob Storage - {self.mode.label} Authentication Demo")

        if not is_valid(self.config, self.mode):
            self._print_configuration_diagnostics()
            return 1

        self._print_configuration()
        try:
            credential = CredentialFactory(self.config, self.mode).build()
            storage_manager = StorageManager(self.config, credential, self.display)

            with storage_manager.get_storage_client() as storage_client:
                report = StorageReporter(storage_client, self.config, self.mode, self.display).run()
                if report.exit_code != 0:
                    return report.exit_code
                if not self._run_blob_operations(storage_manager, storage_client, report.resolved_container):
                    return 1
            return 0
        except KeyboardInterrupt:
            self.display.print_warning("Operation cancelled by user")
            return 1
        except Exception as e:
            logging.error(f"Application error: {e}")
            logging.debug("Application error traceback", exc_info=True)
            self.display.print_error(f"Error: {e}")
            if e.__cause__ is not None:
                self.display.print_plain(f"Inner Exception: {e.__cause__}")
            self.display.print_plain(f"\n{DOCUMENTATION_HINT}")
            return 1

    def _print_configuration(self) -> None:
        if self.mode is AuthMode.APP_REGISTRATION:
            self.display.print_plain(f"Tenant ID: {self.config.tenant_id}")
            self.display.print_plain(f"Client ID: {self.config.client_id}")
        self.display.print_plain(f"Storage Account: {self.config.storage_account_name}")
        self.display.print_plain(f"Container: {self.config.container_name}")
        self.display.print_plain()

    def _print_configuration_diagnostics(self) -> None:
        missing = missing_fields(self.config, self.mode)
        logging.error(f"Missing configuration: {', '.join(missing)}")

        self.display.print_info("Checking configuration values...")
        self.display.print_plain("Environment Variable Status:")
        for name, is_set, display_value in describe_environment(self.config, self.mode):
            status = "✅ Set" if is_set else "❌ Not Set"
            self.display.print_plain(f"  {name}: {status} - {display_value}")
        self.display.print_plain()

        self.display.print_error("Missing required configuration: " + ", ".join(missing))
        self.display.print_plain()
        for line in configuration_help(self.mode):
            self.display.print_plain(line)

    def _run_blob_operations(self, storage_manager: StorageManager, storage_client, container_name: str) -> bool:
        """Run the optional upload and download requested on the command line."""
        succeeded = True
        if self.options.upload_blob:
            self.display.print_section(f"Uploading blob '{self.options.upload_blob}'...")
            succeeded &= storage_manager.upload_text(
                storage_client, container_name, self.options.upload_blob, self.options.upload_content
            )
        if self.options.download_blob:
            self.display.print_section(f"Downloading blob '{self.options.download_blob}'...")
            content = storage_manager.download_text(storage_client, container_name, self.options.download_blob)
            if content is None:
                succeeded = False
            else:
                self.display.print_plain(content)
        return succeeded


def build_parser() -> argparse.ArgumentParser:
    blob_operations = argparse.ArgumentParser(add_help=False)
    blob_operations.add_argument(
        "--upload-blob",
        help="Upload a text blob to the reported container after the report",
        type=str,
    )
    blob_operations.add_argument(
        "--upload-content",
        default="Hello from the Azure Storage authentication demo",
        type=str,
    )
    blob_operations.add_argument(
        "--download-blob",
        help="Download a blob from the reported container and print it",
        type=str,
    )

    parser = argparse.ArgumentParser(description="Azure Blob Storage authentication demo")
    subparsers = parser.add_subparsers(dest="mode", required=True)
    managed_identity = subparsers.add_parser(
        AuthMode.MANAGED_IDENTITY.value,
        parents=[blob_operations],
        help="Authenticate with the managed identity credential chain",
        epilog="Options: --storage-account <name> [--container <name>]",
    )
    managed_identity.set_defaults(auth_mode=AuthMode.MANAGED_IDENTITY)
    app_registration = subparsers.add_parser(
        AuthMode.APP_REGISTRATION.value,
        parents=[blob_operations],
        help="Authenticate with an app registration client secret",
        epilog="Options: --AZURE_TENANT_ID, --AZURE_CLIENT_ID, --AZURE_CLIENT_SECRET, "
        "--STORAGE_ACCOUNT_NAME, --CONTAINER_NAME override the environment",
    )
    app_registration.set_defaults(auth_mode=AuthMode.APP_REGISTRATION)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    argv = sys.argv[1:] if argv is None else argv
    options, config_argv = build_parser().parse_known_args(argv)

    load_environment()
    setup_logging()
    logging.info(f"Starting Azure Storage authentication demo in {options.mode} mode")

    app = AzureStorageApplication(options.auth_mode, argv=config_argv, options=options)
    return app.run()


def main_managed_identity() -> None:
    sys.exit(main([AuthMode.MANAGED_IDENTITY.value, *sys.argv[1:]]))


def main_app_registration() -> None:
    sys.exit(main([AuthMode.APP_REGISTRATION.value, *sys.argv[1:]]))


if __name__ == "__main__":
    sys.exit(main())
