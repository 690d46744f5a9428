"""
Azure client secret creation using Microsoft Graph SDK
"""

from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta
from msgraph.generated.applications.item.add_password.add_password_post_request_body import AddPasswordPostRequestBody
from msgraph.generated.models.password_credential import PasswordCredential

from provisioning.config import DEFAULT_EXPIRY_MONTHS


def build_password_credential(secret_name: str, start: datetime, expiry_months: int = DEFAULT_EXPIRY_MONTHS) -> PasswordCredential:
    """
    Password credential valid from start for expiry_months calendar months.
    The end day is clamped to the last day of a shorter month.
    """
    password_credential = PasswordCredential()
    password_credential.display_name = secret_name
    password_credential.start_date_time = start
    password_credential.end_date_time = start + relativedelta(months=expiry_months)
    return password_credential


async def create_client_secret_async(graph_client, app_object_id: str, secret_name: str,
                                     expiry_months: int = DEFAULT_EXPIRY_MONTHS, now: datetime = None):
    """
    Create a client secret for the app registration using Microsoft Graph SDK

    Args:
        graph_client: Microsoft Graph client instance
        app_object_id: Object ID of the app registration
        secret_name: Display name for the client secret
        expiry_months: Validity window in months
        now: Start of the validity window, defaults to the current UTC time

    Returns:
        The client secret value, or None if it could not be created
    """

    try:
        print(f"   Creating client secret '{secret_name}' for application object ID '{app_object_id}'...")

        start = now or datetime.now(timezone.utc)
        password_credential = build_password_credential(secret_name, start, expiry_months)
        print(f"   Secret valid from: {password_credential.start_date_time.isoformat()}")
        print(f"   Secret expiration date: {password_credential.end_date_time.isoformat()}")

        request_body = AddPasswordPostRequestBody()
        request_body.password_credential = password_credential

        print(f"   Submitting client secret creation to Microsoft Graph...")
        created_secret = await graph_client.applications.by_application_id(app_object_id).add_password.post(request_body)

        client_secret_value = created_secret.secret_text if created_secret else None
        if not client_secret_value:
            print(f"   ERROR: Microsoft Graph returned no secret value")
            return None

        print("   Client secret created successfully")
        print(f"   Secret name: {secret_name}")
        print(f"   Secret ID: {created_secret.key_id}")
        return client_secret_value

    except Exception as e:
        print(f"   ERROR: Failed to create client secret: {str(e)}")
        print(f"   Error type: {type(e).__name__}")
        return None
