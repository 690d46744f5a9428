#!/usr/bin/env python3
"""
Entra ID Application Setup Script

Creates a ready-to-use Entra ID application for automation:
- App registration and its service principal
- Microsoft Graph API permissions resolved from a permission table
- Admin consent for every resolved permission
- Client secret valid for six months
- Outputs the tenant ID, client ID and secret for your pipeline

Requires an existing session (run `az login` first). Run once per application.
"""

import sys, argparse, asyncio
import traceback
from dataclasses import dataclass, field
from msgraph import GraphServiceClient
from provisioning import az_login, permissions
from provisioning.config import CONFIG_FILE, load_config, build_settings
from provisioning.create import (
    create_app_registration,
    create_service_principal,
    assign_permissions,
    grant_admin_consent,
    create_client_secret,
)


@dataclass
class ProvisioningReport:
    tenant_id: str
    account: str
    app_id: str = None
    app_object_id: str = None
    sp_obj_id: str = None
    client_secret: str = None
    resolution: permissions.ResolutionResult = field(default_factory=permissions.ResolutionResult)
    consent: grant_admin_consent.ConsentResult = field(default_factory=grant_admin_consent.ConsentResult)
    errors: list = field(default_factory=list)


def print_status(message, level="info"):
    """Simple console output with different levels"""
    if level == "header":
        print(f"\n{message}")
        print("=" * len(message))
    elif level == "section":
        print(f"\n{message}")
    else:
        print(message)


def report_error(report: ProvisioningReport, message: str):
    print(f"   ERROR: {message}")
    report.errors.append(message)


async def run_provisioning(credential, graph_client, settings) -> ProvisioningReport:
    """
    Run the provisioning steps in order.

    A missing session, a failed app registration or a failed service principal
    raise and stop the run. Everything after that is best effort and ends up
    in report.errors.
    """

    print_status("Session Check", "section")
    session = az_login.get_session_context(credential)
    report = ProvisioningReport(tenant_id=session.tenant_id, account=session.account)

    print_status("App Registration", "section")
    report.app_id, report.app_object_id = await create_app_registration.create_app_registration_async(
        graph_client=graph_client,
        display_name=settings.display_name
    )
    print_status(f"App Registration complete - App ID: {report.app_id}")

    print_status("Service Principal", "section")
    report.sp_obj_id = await create_service_principal.create_service_principal_async(
        graph_client=graph_client,
        app_id=report.app_id
    )
    print_status(f"Service Principal complete - Object ID: {report.sp_obj_id}")

    print_status("Permission Resolution", "section")
    resource_sp_id, app_roles, scopes = None, [], []
    try:
        resource_sp = await permissions.get_resource_service_principal_async(
            graph_client=graph_client,
            resource_app_id=settings.resource_app_id
        )
        resource_sp_id = resource_sp.id
        app_roles = resource_sp.app_roles or []
        scopes = resource_sp.oauth2_permission_scopes or []
    except Exception as e:
        report_error(report, f"Could not load permission catalog for resource app {settings.resource_app_id}: {str(e)}")

    report.resolution = permissions.resolve_permissions(settings.permissions, app_roles, scopes)
    report.errors.extend(skipped.reason for skipped in report.resolution.skipped)
    resolved = report.resolution.resolved
    print_status(f"Resolved {len(resolved)} of {len(settings.permissions)} permission(s)")

    print_status("API Permission Assignment", "section")
    if resolved:
        try:
            await assign_permissions.attach_required_access_async(
                graph_client=graph_client,
                app_object_id=report.app_object_id,
                resource_app_id=settings.resource_app_id,
                resolved=resolved
            )
        except Exception as e:
            report_error(report, f"Failed to update required resource access: {str(e)}")
    else:
        print_status("   No permissions resolved - skipping required resource access update")

    print_status("Admin Consent", "section")
    if resolved:
        report.consent = await grant_admin_consent.grant_admin_consent_async(
            graph_client=graph_client,
            sp_obj_id=report.sp_obj_id,
            resource_sp_id=resource_sp_id,
            resolved=resolved
        )
        report.errors.extend(
            f"Consent failed for {failure.name}: {failure.reason}" for failure in report.consent.failed
        )
    else:
        print_status("   No permissions resolved - skipping admin consent")

    print_status("Client Secret Creation", "section")
    report.client_secret = await create_client_secret.create_client_secret_async(
        graph_client=graph_client,
        app_object_id=report.app_object_id,
        secret_name=settings.secret_name,
        expiry_months=settings.expiry_months
    )
    if report.client_secret is None:
        report.errors.append("Client secret could not be created")

    return report


def print_summary(report: ProvisioningReport):
    print_status("PROVISIONING COMPLETED", "header")
    print_status(f"Tenant ID: {report.tenant_id}")
    print_status(f"Application (client) ID: {report.app_id}")
    print_status(f"Application Object ID: {report.app_object_id}")
    print_status(f"Service Principal Object ID: {report.sp_obj_id}")
    print_status(f"Client Secret: {report.client_secret or 'Not available'}")
    print_status(f"Permissions granted: {len(report.consent.granted)}, "
                 f"skipped: {len(report.resolution.skipped)}, "
                 f"failed: {len(report.consent.failed)}")

    print_status("Your Environment Variables:", "section")
    print("-" * 50)
    print_status(f"export AZURE_CLIENT_ID={report.app_id}")
    print_status(f"export AZURE_CLIENT_SECRET={report.client_secret or ''}")
    print_status(f"export AZURE_TENANT_ID={report.tenant_id}")
    print("-" * 50)
    if report.client_secret:
        print_status("Save the client secret now - it cannot be retrieved again.")

    if report.errors:
        print_status(f"Completed with {len(report.errors)} error(s):", "section")
        for error in report.errors:
            print_status(f"   - {error}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an Entra ID application with admin-consented Graph permissions.")
    parser.add_argument("display_name", nargs="?", default=None,
                        help="Display name for the application (default: MyEntraIDApp)")
    return parser.parse_args(argv)


async def async_main(argv=None):
    """Main async orchestration function"""

    args = parse_args(argv)

    print_status("Entra ID Application Setup Process", "header")

    try:
        print_status("Loading configuration...", "section")
        config = load_config(CONFIG_FILE, required=False)
        if not config:
            print_status(f"No {CONFIG_FILE} found - using built-in defaults")
        settings = build_settings(config, args.display_name)
        print_status("Configuration loaded successfully")
        print_status(f"APP_NAME: {settings.display_name}")
        print_status(f"TENANT_ID: {settings.tenant_id or 'Not configured'}")
        print_status(f"AUTH_MODE: {settings.auth_mode}")
        print_status(f"SECRET_NAME: {settings.secret_name}")
        print_status(f"EXPIRY_MONTHS: {settings.expiry_months}")
        print_status(f"RESOURCE_APP_ID: {settings.resource_app_id}")
        print_status(f"PERMISSIONS: {len(settings.permissions)} configured")

        print_status("Azure Authentication", "section")
        credential = az_login.azure_login(settings.auth_mode, settings.tenant_id)

        print_status("Initializing Microsoft Graph Client", "section")
        graph_client = GraphServiceClient(credentials=credential)
        print_status("Graph client initialized successfully")

        report = await run_provisioning(credential, graph_client, settings)

    except Exception as e:
        print_status(f"ERROR: Setup process failed!", "section")
        print_status(f"   Error details: {str(e)}")
        print_status(f"   Error type: {type(e).__name__}")

        print_status(f"Full traceback:", "section")

        tb_str = traceback.format_exc()
        for line in tb_str.split('\n'):
            if line.strip():
                print_status(line)

        sys.exit(1)

    print_summary(report)
    return report


def main():
    """Synchronous main function that runs the async orchestration"""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
