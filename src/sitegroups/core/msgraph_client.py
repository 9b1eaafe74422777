"""Microsoft Graph API client wrapper."""

from azure.core.credentials import TokenCredential
from azure.identity import CertificateCredential, ClientSecretCredential
from msgraph import GraphServiceClient

from sitegroups.core.config import AzureCredentials, get_azure_credentials


def get_credential(credentials: AzureCredentials | None = None) -> TokenCredential:
    """Create an app-only Azure credential.

    Prefers the certificate when one is configured, otherwise falls back
    to the client secret.

    Args:
        credentials: App registration credentials. If None, loaded from
            environment variables.

    Returns:
        Credential usable for both Graph and SharePoint scopes
    """
    if credentials is None:
        credentials = get_azure_credentials()

    if credentials.uses_certificate:
        return CertificateCredential(
            tenant_id=credentials.tenant_id,
            client_id=credentials.client_id,
            certificate_path=credentials.certificate_path,
            password=credentials.certificate_password,
        )

    return ClientSecretCredential(
        tenant_id=credentials.tenant_id,
        client_id=credentials.client_id,
        client_secret=credentials.client_secret,
    )


def get_graph_client(credential: TokenCredential | None = None) -> GraphServiceClient:
    """Create and return an authenticated MS Graph client.

    Uses client credentials flow (app-only authentication).

    Args:
        credential: Existing credential to share. If None, one is created
            from environment variables.

    Returns:
        Authenticated GraphServiceClient instance
    """
    if credential is None:
        credential = get_credential()

    scopes = ["https://graph.microsoft.com/.default"]
    return GraphServiceClient(credentials=credential, scopes=scopes)
