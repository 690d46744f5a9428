"""
Configuration loading for the Entra ID app provisioning script
"""

import os
from dataclasses import dataclass

import yaml

from provisioning.permissions import DEFAULT_PERMISSIONS, load_permission_table

CONFIG_FILE = "entra_app_config.yaml"

DEFAULT_APP_NAME = "MyEntraIDApp"
DEFAULT_SECRET_NAME = "AutomationSecret"
DEFAULT_EXPIRY_MONTHS = 6
DEFAULT_AUTH_MODE = "cli"

# Microsoft Graph
GRAPH_APP_ID = "00000003-0000-0000-c000-000000000000"

AUTH_MODES = ("cli", "browser", "default")


@dataclass
class ProvisioningSettings:
    display_name: str
    tenant_id: str
    auth_mode: str
    secret_name: str
    expiry_months: int
    resource_app_id: str
    permissions: list


def load_config(config_file_path: str, required: bool = True) -> dict:
    """Load configuration from YAML file"""

    if not os.path.exists(config_file_path):
        if required:
            raise FileNotFoundError(f"Configuration file not found: {config_file_path}")
        return {}

    with open(config_file_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    return config


def build_settings(config: dict, display_name: str = None) -> ProvisioningSettings:
    """
    Merge the loaded config with built-in defaults.
    A display name given on the command line wins over APP_NAME.
    """

    auth_mode = config.get("AUTH_MODE") or DEFAULT_AUTH_MODE
    if auth_mode not in AUTH_MODES:
        raise ValueError(f"AUTH_MODE must be one of {', '.join(AUTH_MODES)}, got '{auth_mode}'")

    # A blank key in the YAML file loads as None
    expiry_months = config.get("EXPIRY_MONTHS")
    if expiry_months is None:
        expiry_months = DEFAULT_EXPIRY_MONTHS
    if isinstance(expiry_months, bool) or not isinstance(expiry_months, int):
        raise ValueError(f"EXPIRY_MONTHS must be a whole number of months, got {expiry_months!r}")
    if expiry_months <= 0:
        raise ValueError(f"EXPIRY_MONTHS must be positive, got {expiry_months}")

    # An explicit empty table means no permissions, not the defaults
    permission_table = config.get("PERMISSIONS")
    if permission_table is None:
        permission_table = DEFAULT_PERMISSIONS

    return ProvisioningSettings(
        display_name=display_name or config.get("APP_NAME") or DEFAULT_APP_NAME,
        tenant_id=config.get("TENANT_ID"),
        auth_mode=auth_mode,
        secret_name=config.get("SECRET_NAME") or DEFAULT_SECRET_NAME,
        expiry_months=expiry_months,
        resource_app_id=config.get("RESOURCE_APP_ID") or GRAPH_APP_ID,
        permissions=load_permission_table(permission_table),
    )
