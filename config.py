"""
Configuration management for Azure Storage operations.

This module handles configuration loading, validation, and environment variable management
for both authentication modes. Values come from the environment first; command-line
options of the same meaning take precedence.
"""

import argparse
import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple

from dotenv import load_dotenv

from display import mask_value

DEFAULT_CONTAINER_NAME = "default-container"

TENANT_ID_VAR = "AZURE_TENANT_ID"
CLIENT_ID_VAR = "AZURE_CLIENT_ID"
CLIENT_SECRET_VAR = "AZURE_CLIENT_SECRET"
STORAGE_ACCOUNT_VAR = "STORAGE_ACCOUNT_NAME"
CONTAINER_VAR = "CONTAINER_NAME"


class AuthMode(Enum):
    """Authentication pattern used to reach the storage account."""
    MANAGED_IDENTITY = "managed-identity"
    APP_REGISTRATION = "app-registration"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


@dataclass(frozen=True)
class Config:
    """
    Configuration settings for one run.

    Attributes:
        tenant_id: Entra ID tenant of the app registration
        client_id: Application (client) ID of the app registration
        client_secret: Client secret of the app registration
        storage_account_name: Name of the storage account to inspect
        container_name: Container to report on. Falls back to the first
                        container of the account when it does not exist.
    """
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    storage_account_name: Optional[str] = None
    container_name: str = DEFAULT_CONTAINER_NAME

    @property
    def account_url(self) -> str:
        return f"https://{self.storage_account_name}.blob.core.windows.net"


# Variable name -> Config attribute, in diagnostic order
_VARIABLES = {
    TENANT_ID_VAR: "tenant_id",
    CLIENT_ID_VAR: "client_id",
    CLIENT_SECRET_VAR: "client_secret",
    STORAGE_ACCOUNT_VAR: "storage_account_name",
    CONTAINER_VAR: "container_name",
}

_REQUIRED = {
    AuthMode.APP_REGISTRATION: [TENANT_ID_VAR, CLIENT_ID_VAR, CLIENT_SECRET_VAR, STORAGE_ACCOUNT_VAR],
    AuthMode.MANAGED_IDENTITY: [STORAGE_ACCOUNT_VAR],
}

_REPORTED = {
    AuthMode.APP_REGISTRATION: list(_VARIABLES),
    AuthMode.MANAGED_IDENTITY: [STORAGE_ACCOUNT_VAR, CONTAINER_VAR],
}


def load_environment() -> bool:
    """Load variables from a .env file without overriding the process environment."""
    return load_dotenv(override=False)


# Option name -> Config variable, per mode
_OPTIONS = {
    AuthMode.MANAGED_IDENTITY: {
        "--storage-account": STORAGE_ACCOUNT_VAR,
        "--container": CONTAINER_VAR,
    },
    AuthMode.APP_REGISTRATION: {f"--{name}": name for name in _VARIABLES},
}


def _build_override_parser(mode: AuthMode) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    for option, name in _OPTIONS[mode].items():
        parser.add_argument(option, dest=name, type=str)
    return parser


def _normalize_option_names(mode: AuthMode, argv: Sequence[str]) -> List[str]:
    """Rewrite option names to their declared spelling, ignoring case."""
    known = {option.lower(): option for option in _OPTIONS[mode]}
    normalized = []
    for token in argv:
        if token.startswith("--"):
            name, separator, value = token.partition("=")
            token = known.get(name.lower(), name) + separator + value
        normalized.append(token)
    return normalized


def load_config(
    mode: AuthMode,
    env: Optional[Mapping[str, str]] = None,
    argv: Optional[Sequence[str]] = None,
) -> Config:
    """
    Build the run configuration from the environment and command-line overrides.

    Never raises for incomplete values: use is_valid() to gate network access.

    Args:
        mode: Authentication mode deciding which options are recognized
        env: Environment mapping, defaults to os.environ
        argv: Command-line tokens; unrecognized ones are ignored

    Returns:
        Config: The merged configuration
    """
    env = os.environ if env is None else env
    overrides, _ = _build_override_parser(mode).parse_known_args(_normalize_option_names(mode, argv or []))

    values = {}
    for name, attribute in _VARIABLES.items():
        value = getattr(overrides, name, None)
        if value is None:
            value = env.get(name)
        values[attribute] = value or None

    if mode is AuthMode.MANAGED_IDENTITY:
        # EnvironmentCredential reads service principal variables on its own
        values.update(tenant_id=None, client_id=None, client_secret=None)

    values["container_name"] = values["container_name"] or DEFAULT_CONTAINER_NAME
    return Config(**values)


def missing_fields(config: Config, mode: AuthMode) -> List[str]:
    return [name for name in _REQUIRED[mode] if not getattr(config, _VARIABLES[name])]


def is_valid(config: Config, mode: AuthMode) -> bool:
    return not missing_fields(config, mode)


def describe_environment(config: Config, mode: AuthMode) -> List[Tuple[str, bool, str]]:
    """
    Diagnostic rows for every variable the mode reads.

    Returns:
        List of (variable name, is set, masked display value)
    """
    rows = []
    for name in _REPORTED[mode]:
        value = getattr(config, _VARIABLES[name])
        if name == CONTAINER_VAR and value == DEFAULT_CONTAINER_NAME:
            rows.append((name, False, f"(default: {DEFAULT_CONTAINER_NAME})"))
            continue
        rows.append((name, bool(value), mask_value(name, value)))
    return rows


def configuration_help(mode: AuthMode) -> List[str]:
    """Usage lines shown when the configuration is incomplete."""
    if mode is AuthMode.MANAGED_IDENTITY:
        return [
            "Usage: managed-identity --storage-account <account-name> [--container <container-name>]",
            f"  or set {STORAGE_ACCOUNT_VAR} and optionally {CONTAINER_VAR}",
        ]
    return [
        "Required Environment Variables:",
        f"  {TENANT_ID_VAR}=your-tenant-id",
        f"  {CLIENT_ID_VAR}=your-client-id",
        f"  {CLIENT_SECRET_VAR}=your-client-secret",
        f"  {STORAGE_ACCOUNT_VAR}=your-storage-account",
        f"  {CONTAINER_VAR}=your-container-name (optional, default: {DEFAULT_CONTAINER_NAME})",
        "",
        "Example:",
        f"  export {TENANT_ID_VAR}=12345678-1234-1234-1234-123456789012",
        f"  export {CLIENT_ID_VAR}=87654321-4321-4321-4321-210987654321",
        f"  export {CLIENT_SECRET_VAR}=your-secret-value",
        f"  export {STORAGE_ACCOUNT_VAR}=mystorageaccount",
        f"  export {CONTAINER_VAR}=documents",
        "",
        "Alternative: use command line arguments with the same names, e.g. --AZURE_TENANT_ID <value>",
    ]
