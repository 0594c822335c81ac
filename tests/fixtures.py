"""
Canned SharePoint values and a fake ProcessQuery endpoint for tests.
"""

from __future__ import annotations

import json

import httpx

WEB_URL = "https://contoso.sharepoint.com"
FIELD_LINK_ID = "5ee2dd25-d941-455a-9bdb-7f2c54aed11b"
CONTENT_TYPE_ID = "0x0100558D85B7216F6A489A499DB361E1AE2F"
WEB_ID = "d1b7a30d-7c22-4c54-a686-f1c298ced3c7"
SITE_ID = "50720268-eff5-48e0-835e-de588b007927"


def expected_body(update_children: bool, field_link_id: str = FIELD_LINK_ID) -> str:
    flag = "true" if update_children else "false"
    return (
        '<Request AddExpandoFieldTypeSuffix="true" SchemaVersion="15.0.0.0" '
        'LibraryVersion="16.0.0.0" ApplicationName=".NET Library" '
        'xmlns="http://schemas.microsoft.com/sharepoint/clientquery/2009">'
        '<Actions>'
        '<ObjectPath Id="77" ObjectPathId="76" />'
        '<ObjectPath Id="79" ObjectPathId="78" />'
        '<Method Name="DeleteObject" Id="80" ObjectPathId="78" />'
        '<Method Name="Update" Id="81" ObjectPathId="24"><Parameters>'
        f'<Parameter Type="Boolean">{flag}</Parameter>'
        '</Parameters></Method>'
        '</Actions>'
        '<ObjectPaths>'
        '<Property Id="76" ParentId="24" Name="FieldLinks" />'
        '<Method Id="78" ParentId="76" Name="GetById"><Parameters>'
        f'<Parameter Type="Guid">{{{field_link_id}}}</Parameter>'
        '</Parameters></Method>'
        '<Identity Id="24" Name="6b3ec69e-00a7-0000-55a3-61f8d779d2b3|'
        '740c6a0b-85e2-48a0-a494-e0f1759d4aa7:'
        f'site:{SITE_ID}:web:{WEB_ID}:contenttype:{CONTENT_TYPE_ID}" />'
        '</ObjectPaths>'
        '</Request>'
    )


SUCCESS_RESPONSE = """[
  {
    "SchemaVersion": "15.0.0.0",
    "LibraryVersion": "16.0.7911.1206",
    "ErrorInfo": null,
    "TraceCorrelationId": "73557d9e-007f-0000-22fb-89971360c85c"
  }
]"""

ERROR_RESPONSE = """[
  {
    "SchemaVersion": "15.0.0.0",
    "LibraryVersion": "16.0.7911.1206",
    "ErrorInfo": {
      "ErrorMessage": "Unknown Error", "ErrorValue": null,
      "TraceCorrelationId": "b33c489e-009b-5000-8240-a8c28e5fd8b4",
      "ErrorCode": -1, "ErrorTypeName": "Microsoft.SharePoint.Client.UnknownError"
    },
    "TraceCorrelationId": "e5547d9e-705d-0000-22fb-8faca5696ed8"
  }
]"""


class FakeSharePoint:
    """
    httpx.MockTransport handler answering the calls a content type command makes.
    ProcessQuery only answers `response_text` if the body matches `expected`.
    """

    def __init__(self, expected: str = "", response_text: str = SUCCESS_RESPONSE):
        self.expected = expected
        self.response_text = response_text
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.method == "GET" and "/_api/site" in url:
            return httpx.Response(200, json={"Id": SITE_ID})
        if request.method == "GET" and "/_api/web" in url:
            return httpx.Response(200, json={"Id": WEB_ID})
        if request.method == "POST" and url.endswith("/_api/contextinfo"):
            return httpx.Response(
                200, json={"FormDigestValue": "ABC", "FormDigestTimeoutSeconds": 1800}
            )
        if request.method == "POST" and url.endswith("/_vti_bin/client.svc/ProcessQuery"):
            body = request.content.decode("utf-8")
            if body == self.expected:
                return httpx.Response(200, text=self.response_text)
            return httpx.Response(400, json={"error": {"message": f"Invalid request: {body}"}})

        return httpx.Response(404, text="Invalid request")

    def process_query_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "ProcessQuery" in str(r.url)]


def odata_error(message: str) -> str:
    return json.dumps({"odata.error": {"code": "-1", "message": {"lang": "en-US", "value": message}}})
