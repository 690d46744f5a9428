"""
Shared fixtures: session credentials and a mocked Microsoft Graph client.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from azure.core.exceptions import ClientAuthenticationError
from msgraph.generated.models.app_role import AppRole
from msgraph.generated.models.application import Application
from msgraph.generated.models.password_credential import PasswordCredential
from msgraph.generated.models.permission_scope import PermissionScope
from msgraph.generated.models.service_principal import ServicePrincipal
from msgraph.generated.models.service_principal_collection_response import ServicePrincipalCollectionResponse

from fakes import (
    ACCOUNT, APP_ID, APP_OBJECT_ID, GRAPH_SP_ID, GROUP_READ_ALL, SP_OBJECT_ID,
    TENANT_ID, USER_READ, USER_READ_ALL, FakeCredential,
)
from provisioning.config import GRAPH_APP_ID, ProvisioningSettings
from provisioning.permissions import load_permission_table


@pytest.fixture
def session_credential():
    return FakeCredential(claims={"tid": TENANT_ID, "upn": ACCOUNT})


@pytest.fixture
def no_session_credential():
    return FakeCredential(error=ClientAuthenticationError("Please run 'az login' to set up an account"))


@pytest.fixture
def graph_service_principal():
    return ServicePrincipal(
        id=GRAPH_SP_ID,
        app_id=GRAPH_APP_ID,
        display_name="Microsoft Graph",
        app_roles=[
            AppRole(id=USER_READ_ALL, value="User.Read.All", allowed_member_types=["Application"]),
            AppRole(id=GROUP_READ_ALL, value="Group.Read.All", allowed_member_types=["Application"]),
        ],
        oauth2_permission_scopes=[
            PermissionScope(id=USER_READ, value="User.Read", type="User"),
        ],
    )


@pytest.fixture
def graph_client(graph_service_principal):
    client = MagicMock()
    client.applications.post = AsyncMock(return_value=Application(app_id=APP_ID, id=APP_OBJECT_ID))
    client.service_principals.post = AsyncMock(
        return_value=ServicePrincipal(id=SP_OBJECT_ID, app_id=APP_ID, display_name="MyEntraIDApp")
    )
    client.service_principals.get = AsyncMock(
        return_value=ServicePrincipalCollectionResponse(value=[graph_service_principal])
    )

    app_item = client.applications.by_application_id.return_value
    app_item.patch = AsyncMock()
    app_item.add_password.post = AsyncMock(
        return_value=PasswordCredential(secret_text="s3cr3t-value", key_id=UUID("66666666-6666-6666-6666-666666666666"))
    )

    sp_item = client.service_principals.by_service_principal_id.return_value
    sp_item.app_role_assignments.post = AsyncMock()
    client.oauth2_permission_grants.post = AsyncMock()
    return client


@pytest.fixture
def make_settings():
    def _make(table, display_name="MyEntraIDApp"):
        return ProvisioningSettings(
            display_name=display_name,
            tenant_id=None,
            auth_mode="cli",
            secret_name="AutomationSecret",
            expiry_months=6,
            resource_app_id=GRAPH_APP_ID,
            permissions=load_permission_table(table),
        )
    return _make
