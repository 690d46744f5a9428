"""
Permission table and resolution against a resource provider's catalog
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph.generated.service_principals.service_principals_request_builder import (
    ServicePrincipalsRequestBuilder,
)


class PermissionCategory(Enum):
    APPLICATION = "Application"
    DELEGATED = "Delegated"


# Graph type tag and the principal kind a catalog entry must allow
TYPE_TAGS = {
    PermissionCategory.APPLICATION: "Role",
    PermissionCategory.DELEGATED: "Scope",
}
EXPECTED_MEMBER_TYPES = {
    PermissionCategory.APPLICATION: "Application",
    PermissionCategory.DELEGATED: "User",
}


@dataclass(frozen=True)
class PermissionDescriptor:
    name: str
    category: PermissionCategory


@dataclass(frozen=True)
class ResolvedPermission:
    id: UUID
    type: str
    name: str


@dataclass(frozen=True)
class SkippedPermission:
    name: str
    category: PermissionCategory
    reason: str


@dataclass
class ResolutionResult:
    resolved: list = field(default_factory=list)
    skipped: list = field(default_factory=list)


DEFAULT_PERMISSIONS = {
    "User.Read.All": "Application",
    "Group.Read.All": "Application",
    "Directory.Read.All": "Application",
    "Application.Read.All": "Application",
    "AuditLog.Read.All": "Application",
    "Policy.Read.All": "Application",
    "RoleManagement.Read.Directory": "Application",
    "Reports.Read.All": "Application",
    "SecurityEvents.Read.All": "Application",
    "IdentityRiskyUser.Read.All": "Application",
    "IdentityRiskEvent.Read.All": "Application",
    "Device.Read.All": "Application",
    "Organization.Read.All": "Application",
    "UserAuthenticationMethod.Read.All": "Application",
    "Sites.Read.All": "Application",
}


def load_permission_table(table: dict) -> list:
    """Turn a name -> category mapping into descriptors, rejecting unknown categories."""
    if not isinstance(table, dict):
        raise ValueError(f"PERMISSIONS must map permission names to categories, got {type(table).__name__}")
    descriptors = []
    for name, category in table.items():
        try:
            descriptors.append(PermissionDescriptor(name=name, category=PermissionCategory(category)))
        except ValueError:
            allowed = ", ".join(c.value for c in PermissionCategory)
            raise ValueError(f"Permission '{name}' has unknown category '{category}'. Allowed: {allowed}")
    return descriptors


async def get_resource_service_principal_async(graph_client, resource_app_id: str):
    """
    Look up the tenant's service principal for a resource application.
    Its appRoles and oauth2PermissionScopes are the permission catalog.
    """

    print(f"   Looking up resource service principal for app ID '{resource_app_id}'...")
    query_params = ServicePrincipalsRequestBuilder.ServicePrincipalsRequestBuilderGetQueryParameters(
        filter=f"appId eq '{resource_app_id}'",
        select=["id", "appId", "displayName", "appRoles", "oauth2PermissionScopes"],
    )
    request_config = RequestConfiguration(query_parameters=query_params)
    result = await graph_client.service_principals.get(request_configuration=request_config)

    if not result or not result.value:
        raise Exception(f"Service principal for resource app ID {resource_app_id} not found")

    resource_sp = result.value[0]
    print(f"   Found resource service principal: {resource_sp.display_name}")
    print(f"   Object ID: {resource_sp.id}")
    print(f"   Application roles: {len(resource_sp.app_roles or [])}, "
          f"delegated scopes: {len(resource_sp.oauth2_permission_scopes or [])}")
    return resource_sp


def _member_types(entry, category: PermissionCategory) -> list:
    if category is PermissionCategory.APPLICATION:
        return entry.allowed_member_types or []
    # Delegated scopes carry a consent type ("User" or "Admin") rather than
    # member types; both are exercised on behalf of a signed-in user.
    return ["User"] if entry.type in ("User", "Admin") else []


def resolve_permissions(descriptors, app_roles, scopes) -> ResolutionResult:
    """
    Match each descriptor against the catalog list for its category.

    First enabled entry whose value matches the name exactly and which
    allows the expected principal kind wins. Names without a match are
    skipped and reported once each.
    """
    result = ResolutionResult()
    catalogs = {
        PermissionCategory.APPLICATION: app_roles or [],
        PermissionCategory.DELEGATED: scopes or [],
    }

    for descriptor in descriptors:
        expected = EXPECTED_MEMBER_TYPES[descriptor.category]
        match = next(
            (entry for entry in catalogs[descriptor.category]
             if entry.value == descriptor.name
             and entry.is_enabled is not False
             and expected in _member_types(entry, descriptor.category)),
            None,
        )
        if match is None:
            reason = f"{descriptor.category.value} permission '{descriptor.name}' not found or disabled in resource catalog"
            print(f"   ERROR: {reason}")
            result.skipped.append(SkippedPermission(descriptor.name, descriptor.category, reason))
            continue

        resolved = ResolvedPermission(id=match.id, type=TYPE_TAGS[descriptor.category], name=descriptor.name)
        print(f"   Resolved {descriptor.name} -> {resolved.id} ({resolved.type})")
        result.resolved.append(resolved)

    return result
