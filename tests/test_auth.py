"""
Tests for token acquisition and session token handling.
"""
import pytest

from o365_cli.auth import authenticator as auth_module
from o365_cli.auth.authenticator import Authenticator, AuthenticationError, resource_for
from o365_cli.config import AuthConfig, CertificateAuth, DelegatedAuth
from o365_cli.errors import AuthError

pytestmark = pytest.mark.asyncio


class FakePublicClient:
    instances = []

    def __init__(self, client_id, authority):
        self.client_id = client_id
        self.authority = authority
        self.scopes = []
        FakePublicClient.instances.append(self)

    def get_accounts(self):
        return [{"username": "admin@contoso.onmicrosoft.com"}]

    def acquire_token_silent(self, scopes, account):
        self.scopes.append(scopes)
        return {"access_token": f"token-for-{scopes[0]}"}


@pytest.fixture
def delegated_auth(monkeypatch):
    FakePublicClient.instances = []
    monkeypatch.setattr(auth_module.msal, "PublicClientApplication", FakePublicClient)
    return Authenticator(AuthConfig(
        mode="delegated",
        delegated=DelegatedAuth(tenant_id="tenant", client_id="client"),
    ))


async def test_resource_for_strips_path():
    assert resource_for("https://Contoso.sharepoint.com/sites/team/") == "https://contoso.sharepoint.com"


async def test_resource_for_rejects_relative_url():
    with pytest.raises(AuthenticationError):
        resource_for("/sites/team")


async def test_delegated_token_is_scoped_and_cached(delegated_auth):
    token = await delegated_auth.acquire_token("https://contoso.sharepoint.com")
    again = await delegated_auth.acquire_token("https://contoso.sharepoint.com/")

    assert token == again == "token-for-https://contoso.sharepoint.com/.default"
    app = FakePublicClient.instances[0]
    assert app.authority == "https://login.microsoftonline.com/tenant"
    assert app.scopes == [["https://contoso.sharepoint.com/.default"]]


async def test_unknown_mode_fails():
    with pytest.raises(AuthenticationError, match="Unknown auth mode"):
        await Authenticator(AuthConfig(mode="password")).acquire_token("https://contoso.sharepoint.com")


async def test_missing_certificate_file(tmp_path, monkeypatch):
    monkeypatch.setenv("O365_CLI_CERT_PASSWORD", "secret")
    authenticator = Authenticator(AuthConfig(
        mode="certificate",
        certificate=CertificateAuth(
            tenant_id="t", client_id="c", certificate_path=str(tmp_path / "missing.txt")
        ),
    ))
    with pytest.raises(AuthError, match="Certificate file not found"):
        await authenticator.acquire_token("https://contoso.sharepoint.com")


async def test_token_error_description_is_surfaced():
    with pytest.raises(AuthenticationError, match="AADSTS700016"):
        Authenticator._token_from(
            {"error": "unauthorized_client", "error_description": "AADSTS700016: app not found"},
            "Certificate auth failed",
        )
