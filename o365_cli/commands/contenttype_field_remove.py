"""
spo contenttype field remove — Remove a field link from a site content type.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass

from ..csom import (
    Identity,
    MethodAction,
    MethodPath,
    ObjectPathAction,
    Parameter,
    ProcessQueryRequest,
    Property,
    execute_object_path_request,
)
from ..errors import TransportError, ValidationError
from .base import (
    BaseCommand,
    CommandResult,
    GlobalOptions,
    is_valid_guid,
    is_valid_sharepoint_url,
    require,
)

logger = logging.getLogger("o365_cli.commands")

# Server-side identity prefix for objects addressed by site/web/content type
IDENTITY_PREFIX = "6b3ec69e-00a7-0000-55a3-61f8d779d2b3|740c6a0b-85e2-48a0-a494-e0f1759d4aa7"


@dataclass
class ContentTypeFieldRemoveOptions(GlobalOptions):
    web_url: str = ""
    content_type_id: str = ""
    field_link_id: str = ""
    update_child_content_types: bool = False


def build_field_link_removal(
    site_id: str,
    web_id: str,
    content_type_id: str,
    field_link_id: str,
    update_child_content_types: bool,
) -> ProcessQueryRequest:
    """FieldLinks.GetById(id).DeleteObject() followed by ContentType.Update(updateChildren)."""
    content_type = Identity(
        24, f"{IDENTITY_PREFIX}:site:{site_id}:web:{web_id}:contenttype:{content_type_id}"
    )
    field_links = Property(76, content_type.id, "FieldLinks")
    field_link = MethodPath(78, field_links.id, "GetById", [Parameter.guid(field_link_id)])

    return ProcessQueryRequest(
        actions=[
            ObjectPathAction(77, field_links.id),
            ObjectPathAction(79, field_link.id),
            MethodAction("DeleteObject", 80, field_link.id),
            MethodAction(
                "Update", 81, content_type.id,
                [Parameter.boolean(update_child_content_types)],
            ),
        ],
        object_paths=[field_links, field_link, content_type],
    )


class ContentTypeFieldRemoveCommand(BaseCommand):
    name = "spo contenttype field remove"
    description = "Removes a column from a site or list content type"

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-u", "--webUrl", dest="web_url",
            help="Absolute URL of the site where the content type is located",
        )
        parser.add_argument(
            "-i", "--contentTypeId", dest="content_type_id",
            help="The ID of the content type to remove the column from",
        )
        parser.add_argument(
            "-f", "--fieldLinkId", dest="field_link_id",
            help="The ID of the column to remove",
        )
        parser.add_argument(
            "-c", "--updateChildContentTypes", dest="update_child_content_types",
            action="store_true",
            help="Update child content types",
        )

    @classmethod
    def options_from_args(cls, args: argparse.Namespace) -> ContentTypeFieldRemoveOptions:
        return ContentTypeFieldRemoveOptions(
            web_url=args.web_url or "",
            content_type_id=args.content_type_id or "",
            field_link_id=args.field_link_id or "",
            update_child_content_types=bool(args.update_child_content_types),
            debug=bool(getattr(args, "debug", False)),
            verbose=bool(getattr(args, "verbose", False)),
        )

    def validate(self, options: ContentTypeFieldRemoveOptions) -> None:
        require(options.web_url, "webUrl")
        require(options.content_type_id, "contentTypeId")
        require(options.field_link_id, "fieldLinkId")
        if not is_valid_sharepoint_url(options.web_url):
            raise ValidationError(f"{options.web_url} is not a valid SharePoint Online site URL")
        if not is_valid_guid(options.field_link_id):
            raise ValidationError(f"{options.field_link_id} is not a valid GUID")

    async def run(self, options: ContentTypeFieldRemoveOptions, result: CommandResult):
        web_url = options.web_url.rstrip("/")

        client = await self.open_client(web_url)
        async with client:
            logger.info("Retrieving site and web ids...")
            site_id = await self._get_id(client, f"{web_url}/_api/site?$select=Id")
            web_id = await self._get_id(client, f"{web_url}/_api/web?$select=Id")

            logger.info(f"Retrieving request digest for {web_url}...")
            digest = await client.get_request_digest(web_url)

            request = build_field_link_removal(
                site_id,
                web_id,
                options.content_type_id,
                options.field_link_id.strip("{}"),
                options.update_child_content_types,
            )
            logger.info(
                f"Removing field link {options.field_link_id} "
                f"from content type {options.content_type_id}..."
            )
            await execute_object_path_request(client, web_url, request, digest)

        result.data["site_id"] = site_id
        result.data["web_id"] = web_id

    @staticmethod
    async def _get_id(client, url: str) -> str:
        data = await client.get_json(url)
        value = data.get("Id")
        if not value:
            raise TransportError(f"Response from {url} did not include an Id", url=url)
        return str(value)
