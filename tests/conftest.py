"""
Shared fixtures: a connected session with a canned token and a fake SharePoint.
"""
import pytest

from o365_cli.spo.session import SpoSession

from .fixtures import WEB_URL, FakeSharePoint


@pytest.fixture
def token_calls():
    return []


@pytest.fixture
def session(token_calls):
    """A connected session whose token provider always returns 'ABC'."""
    async def provider(resource: str) -> str:
        token_calls.append(resource)
        return "ABC"

    return SpoSession(url=WEB_URL, token_provider=provider)


@pytest.fixture
def disconnected_session():
    return SpoSession()


@pytest.fixture
def fake_spo():
    return FakeSharePoint()


@pytest.fixture
def profile_path(tmp_path):
    return tmp_path / "profiles.json"
