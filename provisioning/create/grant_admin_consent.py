"""
Admin consent for resolved permissions using Microsoft Graph SDK
"""

from dataclasses import dataclass, field
from uuid import UUID

from msgraph.generated.models.app_role_assignment import AppRoleAssignment
from msgraph.generated.models.o_auth2_permission_grant import OAuth2PermissionGrant

ALL_PRINCIPALS = "AllPrincipals"


@dataclass
class ConsentFailure:
    name: str
    reason: str


@dataclass
class ConsentResult:
    granted: list = field(default_factory=list)
    failed: list = field(default_factory=list)


async def grant_app_role_async(graph_client, sp_obj_id: str, resource_sp_id: str, permission):
    """Assign an application role to the service principal itself."""
    assignment = AppRoleAssignment()
    assignment.principal_id = UUID(str(sp_obj_id))
    assignment.resource_id = UUID(str(resource_sp_id))
    assignment.app_role_id = UUID(str(permission.id))

    return await graph_client.service_principals.by_service_principal_id(sp_obj_id).app_role_assignments.post(assignment)


async def grant_delegated_scope_async(graph_client, sp_obj_id: str, resource_sp_id: str, permission):
    """Create a tenant-wide delegated grant; AllPrincipals grants carry no principal ID."""
    grant = OAuth2PermissionGrant()
    grant.client_id = sp_obj_id
    grant.consent_type = ALL_PRINCIPALS
    grant.resource_id = resource_sp_id
    grant.scope = permission.name

    return await graph_client.oauth2_permission_grants.post(grant)


async def grant_admin_consent_async(graph_client, sp_obj_id: str, resource_sp_id: str, resolved: list) -> ConsentResult:
    """
    Grant admin consent for every resolved permission.

    Roles become app role assignments and scopes become AllPrincipals OAuth2
    permission grants. A failed grant is recorded and the loop moves on.
    """

    result = ConsentResult()
    print(f"   Granting admin consent for {len(resolved)} permission(s)...")

    for permission in resolved:
        try:
            if permission.type == "Role":
                await grant_app_role_async(graph_client, sp_obj_id, resource_sp_id, permission)
            else:
                await grant_delegated_scope_async(graph_client, sp_obj_id, resource_sp_id, permission)
            print(f"   Consent granted: {permission.name} ({permission.type})")
            result.granted.append(permission)
        except Exception as e:
            print(f"   ERROR: Failed to grant consent for {permission.name}: {str(e)}")
            print(f"   Error type: {type(e).__name__}")
            result.failed.append(ConsentFailure(name=permission.name, reason=str(e)))

    print(f"   Consent granted for {len(result.granted)} of {len(resolved)} permission(s)")
    return result
