from .objectpaths import (
    Identity,
    InvalidObjectPathGraph,
    MethodAction,
    MethodPath,
    ObjectPathAction,
    Parameter,
    ProcessQueryRequest,
    Property,
)
from .response import ErrorInfo, ResponseEnvelope, ResultRecord, parse_response
from .handler import execute_object_path_request

__all__ = [
    "Identity",
    "InvalidObjectPathGraph",
    "MethodAction",
    "MethodPath",
    "ObjectPathAction",
    "Parameter",
    "ProcessQueryRequest",
    "Property",
    "ErrorInfo",
    "ResponseEnvelope",
    "ResultRecord",
    "parse_response",
    "execute_object_path_request",
]
