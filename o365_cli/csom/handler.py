"""
ProcessQuery execution: serialize, POST once, resolve to success or error.
"""

from __future__ import annotations

import logging

from ..spo.client import FormDigest, SpoClient
from .objectpaths import ProcessQueryRequest, describe
from .response import ResponseEnvelope, parse_response

logger = logging.getLogger("o365_cli.csom")


async def execute_object_path_request(
    client: SpoClient,
    web_url: str,
    request: ProcessQueryRequest,
    digest: FormDigest,
) -> ResponseEnvelope:
    """
    Send one CSOM envelope to ProcessQuery and check every result record.

    Raises InvalidObjectPathGraph before sending if the graph is malformed,
    TransportError if the call or body parsing fails, and RemoteError if any
    record carries an ErrorInfo. Never retries.
    """
    body = request.to_xml()
    logger.debug(
        "ProcessQuery actions: "
        + ", ".join(describe(a) for a in request.actions)
    )
    logger.debug(f"ProcessQuery request body: {body}")

    text = await client.process_query(web_url, body, digest)
    logger.debug(f"ProcessQuery response body: {text}")

    envelope = parse_response(text)
    envelope.raise_for_error()
    return envelope
