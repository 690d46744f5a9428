"""
Azure authentication and session checks for Microsoft Graph
"""

from dataclasses import dataclass

import jwt
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import AzureCliCredential, DefaultAzureCredential, InteractiveBrowserCredential

GRAPH_SCOPE = "https://graph.microsoft.com/.default"

# Checked in order; the last one covers app-only sessions
ACCOUNT_CLAIMS = ("upn", "unique_name", "preferred_username", "appid")


class SessionError(Exception):
    """No usable authenticated session is available."""


@dataclass
class SessionContext:
    tenant_id: str
    account: str


def azure_login(auth_mode: str = "cli", az_tenant_id: str = None):
    """
    Build a credential for the requested auth mode.

    'cli' reuses an existing `az login` session, 'browser' opens an
    interactive browser login and 'default' walks DefaultAzureCredential.
    """

    try:
        if auth_mode == "cli":
            credential = AzureCliCredential(tenant_id=az_tenant_id)
            print("   Azure CLI credential created")
        elif auth_mode == "browser":
            credential = InteractiveBrowserCredential(tenant_id=az_tenant_id)
            print("   Interactive browser credential created")
        elif auth_mode == "default":
            if az_tenant_id:
                print(f"   Note: TENANT_ID '{az_tenant_id}' is not applied in default mode; set AZURE_TENANT_ID instead")
            credential = DefaultAzureCredential()
            print("   Default Azure credential created")
        else:
            raise ValueError(f"Unknown auth mode '{auth_mode}' (expected cli, browser or default)")
        return credential
    except ClientAuthenticationError as e:
        print(f"   Authentication failed: {e}")
        raise SessionError(str(e)) from e


def get_session_context(credential) -> SessionContext:
    """
    Verify the credential belongs to a signed-in account.

    Raises SessionError when no token can be acquired or the token does not
    identify an account.
    """

    print("   Checking for an authenticated session...")
    try:
        access_token = credential.get_token(GRAPH_SCOPE)
    except ClientAuthenticationError as e:
        print(f"   No active session: {e}")
        raise SessionError(f"No active session found. Run 'az login' first. ({e})") from e

    try:
        claims = jwt.decode(access_token.token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        raise SessionError(f"Could not read session token: {e}") from e

    account = next((claims[c] for c in ACCOUNT_CLAIMS if claims.get(c)), None)
    tenant_id = claims.get("tid")
    if not account or not tenant_id:
        raise SessionError("Session token does not identify an account and tenant")

    print(f"   Signed in as: {account}")
    print(f"   Tenant ID: {tenant_id}")
    return SessionContext(tenant_id=tenant_id, account=account)
