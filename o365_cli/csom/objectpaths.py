"""
CSOM object-path graph and its ProcessQuery XML serialization.

A request is two ordered lists: the actions the server executes, and the
object paths (Identity / Property / Method nodes) those actions point at.
The server compares the payload literally, so element and attribute order
are fixed and must not be reformatted.
"""

from __future__ import annotations

import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..config import (
    CSOM_APPLICATION_NAME,
    CSOM_LIBRARY_VERSION,
    CSOM_NAMESPACE,
    CSOM_SCHEMA_VERSION,
)


class InvalidObjectPathGraph(ValueError):
    """Raised when actions or object paths reference ids that do not resolve."""
    pass


# ─── Parameters ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Parameter:
    """A typed <Parameter> value. Use the constructors, not the raw init."""
    type: str
    value: Optional[str]

    @classmethod
    def boolean(cls, value: bool) -> "Parameter":
        return cls("Boolean", "true" if value else "false")

    @classmethod
    def string(cls, value: str) -> "Parameter":
        return cls("String", value)

    @classmethod
    def guid(cls, value: Union[str, uuid.UUID]) -> "Parameter":
        text = str(value).strip().strip("{}")
        return cls("Guid", "{" + text + "}")

    @classmethod
    def int32(cls, value: int) -> "Parameter":
        if not -2**31 <= value < 2**31:
            raise ValueError(f"Int32 parameter out of range: {value}")
        return cls("Int32", str(value))

    @classmethod
    def int64(cls, value: int) -> "Parameter":
        return cls("Int64", str(value))

    @classmethod
    def double(cls, value: float) -> "Parameter":
        return cls("Double", repr(float(value)))

    @classmethod
    def null(cls) -> "Parameter":
        return cls("Null", None)

    def to_element(self) -> ET.Element:
        el = ET.Element("Parameter", {"Type": self.type})
        if self.value is not None:
            el.text = self.value
        return el


def _parameters_element(parameters: list[Parameter]) -> ET.Element:
    container = ET.Element("Parameters")
    for p in parameters:
        container.append(p.to_element())
    return container


# ─── Object paths ───────────────────────────────────────────────────────────

@dataclass
class Identity:
    """A remote object addressed by its server-side identity string."""
    id: int
    name: str

    parent_id = None

    def to_element(self) -> ET.Element:
        return ET.Element("Identity", {"Id": str(self.id), "Name": self.name})


@dataclass
class Property:
    """Property access on the object at parent_id."""
    id: int
    parent_id: int
    name: str

    def to_element(self) -> ET.Element:
        return ET.Element(
            "Property",
            {"Id": str(self.id), "ParentId": str(self.parent_id), "Name": self.name},
        )


@dataclass
class MethodPath:
    """Method invocation on the object at parent_id, yielding a new object."""
    id: int
    parent_id: int
    name: str
    parameters: list[Parameter] = field(default_factory=list)

    def to_element(self) -> ET.Element:
        el = ET.Element(
            "Method",
            {"Id": str(self.id), "ParentId": str(self.parent_id), "Name": self.name},
        )
        if self.parameters:
            el.append(_parameters_element(self.parameters))
        return el


ObjectPathNode = Union[Identity, Property, MethodPath]


# ─── Actions ────────────────────────────────────────────────────────────────

@dataclass
class ObjectPathAction:
    """Materialize the object path object_path_id on the server."""
    id: int
    object_path_id: int

    def to_element(self) -> ET.Element:
        return ET.Element(
            "ObjectPath",
            {"Id": str(self.id), "ObjectPathId": str(self.object_path_id)},
        )


@dataclass
class MethodAction:
    """Call a method on the object at object_path_id."""
    name: str
    id: int
    object_path_id: int
    parameters: list[Parameter] = field(default_factory=list)

    def to_element(self) -> ET.Element:
        el = ET.Element(
            "Method",
            {"Name": self.name, "Id": str(self.id), "ObjectPathId": str(self.object_path_id)},
        )
        if self.parameters:
            el.append(_parameters_element(self.parameters))
        return el


Action = Union[ObjectPathAction, MethodAction]


# ─── Request ────────────────────────────────────────────────────────────────

@dataclass
class ProcessQueryRequest:
    """One ProcessQuery envelope: ordered actions over an object-path graph."""
    actions: list[Action] = field(default_factory=list)
    object_paths: list[ObjectPathNode] = field(default_factory=list)

    def validate(self) -> None:
        """
        Check the graph is well formed.

        Raises InvalidObjectPathGraph if the action list is empty, an id is
        used twice, or an ObjectPathId / ParentId does not resolve.
        """
        if not self.actions:
            raise InvalidObjectPathGraph("ProcessQuery request has no actions")

        seen: set[int] = set()
        for item in [*self.actions, *self.object_paths]:
            if item.id in seen:
                raise InvalidObjectPathGraph(f"Duplicate id {item.id} in request")
            seen.add(item.id)

        path_ids = {p.id for p in self.object_paths}
        for node in self.object_paths:
            if node.parent_id is not None and node.parent_id not in path_ids:
                raise InvalidObjectPathGraph(
                    f"Object path {node.id} has unresolved ParentId {node.parent_id}"
                )
        for action in self.actions:
            if action.object_path_id not in path_ids:
                raise InvalidObjectPathGraph(
                    f"Action {action.id} references unknown ObjectPathId {action.object_path_id}"
                )

    def to_element(self) -> ET.Element:
        root = ET.Element(
            "Request",
            {
                "AddExpandoFieldTypeSuffix": "true",
                "SchemaVersion": CSOM_SCHEMA_VERSION,
                "LibraryVersion": CSOM_LIBRARY_VERSION,
                "ApplicationName": CSOM_APPLICATION_NAME,
                # Plain attribute, not an ElementTree namespace: keeps tags unprefixed
                "xmlns": CSOM_NAMESPACE,
            },
        )
        actions = ET.SubElement(root, "Actions")
        for action in self.actions:
            actions.append(action.to_element())
        paths = ET.SubElement(root, "ObjectPaths")
        for node in self.object_paths:
            paths.append(node.to_element())
        return root

    def to_xml(self) -> str:
        """Validate and serialize to the literal request body."""
        self.validate()
        return ET.tostring(self.to_element(), encoding="unicode")


def describe(value: Any) -> str:
    """Short label for a node or action, for debug logs."""
    name = getattr(value, "name", "")
    return f"{type(value).__name__}#{value.id}" + (f"({name})" if name else "")
