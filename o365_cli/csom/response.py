"""
ProcessQuery response envelope parsing.

The body is a JSON array. Header records (dicts carrying SchemaVersion /
ErrorInfo) are interleaved with `<action id>, <result>` pairs for actions
that return data.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import RemoteError, TransportError

logger = logging.getLogger("o365_cli.csom")

_RECORD_KEYS = ("SchemaVersion", "LibraryVersion", "ErrorInfo")


@dataclass
class ErrorInfo:
    error_message: str
    error_value: Any = None
    error_code: Optional[int] = None
    error_type_name: str = ""
    trace_correlation_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ErrorInfo":
        return cls(
            error_message=data.get("ErrorMessage") or "",
            error_value=data.get("ErrorValue"),
            error_code=data.get("ErrorCode"),
            error_type_name=data.get("ErrorTypeName") or "",
            trace_correlation_id=data.get("TraceCorrelationId") or "",
        )

    @classmethod
    def from_value(cls, value: Any) -> "ErrorInfo":
        """Any non-null ErrorInfo is an error, even when it is not an object."""
        if isinstance(value, dict):
            return cls.from_dict(value)
        return cls(error_message=str(value), error_value=value)


@dataclass
class ResultRecord:
    schema_version: str = ""
    library_version: str = ""
    error_info: Optional[ErrorInfo] = None
    trace_correlation_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ResultRecord":
        raw_error = data.get("ErrorInfo")
        return cls(
            schema_version=data.get("SchemaVersion") or "",
            library_version=data.get("LibraryVersion") or "",
            error_info=ErrorInfo.from_value(raw_error) if raw_error is not None else None,
            trace_correlation_id=data.get("TraceCorrelationId") or "",
        )


@dataclass
class ResponseEnvelope:
    records: list[ResultRecord] = field(default_factory=list)
    # Action id -> returned payload, for actions that produce one
    results: dict[int, Any] = field(default_factory=dict)

    @property
    def first_error(self) -> Optional[ResultRecord]:
        for record in self.records:
            if record.error_info is not None:
                return record
        return None

    def raise_for_error(self) -> None:
        """Raise RemoteError for the first record carrying an ErrorInfo."""
        record = self.first_error
        if record is None:
            return
        info = record.error_info
        raise RemoteError(
            info.error_message,
            error_code=info.error_code,
            correlation_id=info.trace_correlation_id or record.trace_correlation_id,
            error_type_name=info.error_type_name,
            error_value=info.error_value,
        )


def parse_response(body: str) -> ResponseEnvelope:
    """
    Deserialize a ProcessQuery response body.

    Raises TransportError if the body is not a JSON array.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise TransportError(f"Unable to parse ProcessQuery response: {e}")

    if not isinstance(data, list):
        raise TransportError("Unexpected ProcessQuery response: expected a JSON array")

    envelope = ResponseEnvelope()
    pending_id: Optional[int] = None
    for entry in data:
        if isinstance(entry, dict) and any(k in entry for k in _RECORD_KEYS):
            envelope.records.append(ResultRecord.from_dict(entry))
            pending_id = None
        elif isinstance(entry, int) and not isinstance(entry, bool) and pending_id is None:
            pending_id = entry
        elif pending_id is not None:
            envelope.results[pending_id] = entry
            pending_id = None
        else:
            logger.debug(f"Ignoring unexpected ProcessQuery entry: {entry!r}")

    return envelope
