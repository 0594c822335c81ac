"""
Option validation for `spo contenttype field remove`; nothing here touches the network.
"""
import pytest

from o365_cli.commands import ContentTypeFieldRemoveCommand, ContentTypeFieldRemoveOptions
from o365_cli.commands.base import is_valid_sharepoint_url
from o365_cli.errors import ValidationError

from .fixtures import CONTENT_TYPE_ID, FIELD_LINK_ID, WEB_URL


def _options(**overrides) -> ContentTypeFieldRemoveOptions:
    values = dict(
        web_url=WEB_URL,
        content_type_id=CONTENT_TYPE_ID,
        field_link_id=FIELD_LINK_ID,
        update_child_content_types=True,
    )
    values.update(overrides)
    return ContentTypeFieldRemoveOptions(**values)


class TestValidation:

    @pytest.fixture
    def command(self, session, fake_spo):
        return ContentTypeFieldRemoveCommand(session, transport=fake_spo.transport)

    @pytest.mark.parametrize("missing", ["web_url", "content_type_id", "field_link_id"])
    def test_fails_when_required_option_missing(self, command, missing):
        with pytest.raises(ValidationError):
            command.validate(_options(**{missing: ""}))

    def test_fails_when_field_link_id_not_a_guid(self, command):
        with pytest.raises(ValidationError, match="xxx is not a valid GUID"):
            command.validate(_options(field_link_id="xxx"))

    def test_fails_when_web_url_not_sharepoint(self, command):
        with pytest.raises(ValidationError):
            command.validate(_options(web_url="https://contoso.com"))

    def test_accepts_braced_guid(self, command):
        command.validate(_options(field_link_id="{" + FIELD_LINK_ID + "}"))

    def test_passes_validation(self, command):
        command.validate(_options(debug=True))


class TestSharePointUrl:

    @pytest.mark.parametrize("url", [
        "https://contoso.sharepoint.com",
        "https://contoso.sharepoint.com/",
        "https://contoso.sharepoint.com/sites/team",
        "https://Contoso-Dev.SharePoint.com/sites/team",
        "https://contoso.sharepoint.us/sites/team",
    ])
    def test_accepts_site_urls(self, url):
        assert is_valid_sharepoint_url(url)

    @pytest.mark.parametrize("url", [
        "",
        None,
        "contoso.sharepoint.com",
        "http://contoso.sharepoint.com",
        "https://sharepoint.evil.com",
        "https://contoso.sharepoint.com.evil.com",
        "https://contoso.sharepoint.evil.com",
        "https://contoso.sharepoint.com/sites/a?x=1",
        "https://contoso.sharepoint.com/sites/a#frag",
    ])
    def test_rejects_other_urls(self, url):
        assert not is_valid_sharepoint_url(url)
