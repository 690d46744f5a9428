"""
Azure App Registration creation using Microsoft Graph SDK
"""

from msgraph.generated.models.application import Application

async def create_app_registration_async(graph_client, display_name: str) -> tuple:
    """
    Create an Azure AD app registration using Microsoft Graph SDK
    Always creates a new application; display names are not deduplicated.
    Returns (application ID, application object ID)
    """

    try:
        print(f"   Preparing application object with display name: {display_name}")
        application = Application()
        application.display_name = display_name

        print(f"   Submitting app registration to Microsoft Graph...")
        created_app = await graph_client.applications.post(application)
        if not created_app or not created_app.app_id or not created_app.id:
            raise Exception(f"Microsoft Graph returned no application for '{display_name}'")

        print(f"   App registration created successfully")
        print(f"   New App ID: {created_app.app_id}")
        print(f"   New Object ID: {created_app.id}")
        return created_app.app_id, created_app.id

    except Exception as e:
        print(f"   Failed to create app registration: {str(e)}")
        print(f"   Error type: {type(e).__name__}")
        raise
