"""
Required resource access (API permissions) update using Microsoft Graph SDK
"""

from msgraph.generated.models.application import Application
from msgraph.generated.models.required_resource_access import RequiredResourceAccess
from msgraph.generated.models.resource_access import ResourceAccess

async def attach_required_access_async(graph_client, app_object_id: str, resource_app_id: str, resolved: list):
    """
    Replace the application's requiredResourceAccess with a single entry for
    the resource app holding every resolved permission.

    This overwrites any existing entries. Call it once, after resolution.
    """

    print(f"   Preparing required resource access for resource app ID: {resource_app_id}")
    resource_access = []
    for permission in resolved:
        access = ResourceAccess()
        access.id = permission.id
        access.type = permission.type
        resource_access.append(access)
        print(f"   - {permission.name} ({permission.type})")

    required_access = RequiredResourceAccess()
    required_access.resource_app_id = resource_app_id
    required_access.resource_access = resource_access

    application = Application()
    application.required_resource_access = [required_access]

    print(f"   Submitting {len(resource_access)} permission(s) to Microsoft Graph...")
    await graph_client.applications.by_application_id(app_object_id).patch(application)
    print(f"   Required resource access updated")
