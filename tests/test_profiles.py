"""
Tests for connection profile persistence.
"""
import json

from o365_cli.profiles import ConnectionProfile, ProfileStore, resolve_profile


def _profile(name: str, **kwargs) -> ConnectionProfile:
    return ConnectionProfile(
        name=name,
        tenant_id="tenant",
        client_id="client",
        spo_url=f"https://{name}.sharepoint.com",
        **kwargs,
    )


def test_missing_file_gives_empty_store(profile_path):
    store = ProfileStore.load(profile_path)
    assert store.profiles == {}
    assert store.get_default() is None


def test_first_profile_becomes_default(profile_path):
    store = ProfileStore.load(profile_path)
    store.add(_profile("contoso"))
    store.add(_profile("fabrikam"))

    reloaded = ProfileStore.load(profile_path)
    assert reloaded.default_profile == "contoso"
    assert [p.name for p in reloaded.list_profiles()] == ["contoso", "fabrikam"]
    assert reloaded.get("FABRIKAM").spo_url == "https://fabrikam.sharepoint.com"


def test_remove_default_moves_default(profile_path):
    store = ProfileStore.load(profile_path)
    store.add(_profile("contoso"))
    store.add(_profile("fabrikam"))

    assert store.remove("contoso") is True
    assert store.remove("contoso") is False
    assert ProfileStore.load(profile_path).default_profile == "fabrikam"


def test_set_default_and_resolve(profile_path):
    store = ProfileStore.load(profile_path)
    store.add(_profile("contoso"))
    store.add(_profile("fabrikam", auth_mode="delegated"))

    assert store.set_default("missing") is False
    assert store.set_default("fabrikam") is True
    assert resolve_profile(store=ProfileStore.load(profile_path)).name == "fabrikam"
    assert resolve_profile("contoso", store=store).auth_mode == "certificate"


def test_corrupt_file_is_ignored(profile_path):
    profile_path.write_text("{not json", encoding="utf-8")
    assert ProfileStore.load(profile_path).profiles == {}


def test_saved_format(profile_path):
    ProfileStore.load(profile_path).add(_profile("contoso"))
    data = json.loads(profile_path.read_text(encoding="utf-8"))
    assert data["default_profile"] == "contoso"
    assert data["profiles"]["contoso"]["spo_url"] == "https://contoso.sharepoint.com"
