"""Hierarchical gNMI paths.

A path is an ordered list of elements, each with a name and an optional
key/value attribute map, plus a target and an origin. Two constructors feed
the same representation:

    Path().push("interfaces").push("interface", {"name": "ethernet-1/1"})
    Path.from_str("interfaces/interface/state")

The slash shorthand cannot carry attributes, and it offers no escaping, so a
literal ``/`` inside an element name (or attribute value) can only be
expressed with ``push``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .protobuf_util import gnmi_pb2

SEPARATOR = "/"


@dataclass(frozen=True)
class PathElement:
    """One segment of a path.

    Elements are immutable and hashable. The attribute map is copied on
    construction, so mutating the caller's dict does not affect the element.
    """

    name: str
    attributes: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("path element name must not be empty")
        object.__setattr__(self, "attributes", dict(self.attributes))

    def __hash__(self) -> int:
        return hash((self.name, frozenset(self.attributes.items())))

    def to_proto(self) -> gnmi_pb2.PathElem:
        return gnmi_pb2.PathElem(name=self.name, key=dict(self.attributes))

    @classmethod
    def from_proto(cls, elem: gnmi_pb2.PathElem) -> PathElement:
        """Build an element from its wire form.

        Raises:
            ValueError: If ``elem`` has an empty name
        """
        return cls(elem.name, dict(elem.key))


@dataclass
class Path:
    """Ordered address of a node in a device's data tree."""

    target: str = ""
    origin: str = ""
    elements: list[PathElement] = field(default_factory=list)

    def push(self, name: str, attributes: Mapping[str, str] | None = None) -> Path:
        """Append an element and return the path for chaining.

        Args:
            name: Element name, must not be empty
            attributes: Key/value selectors, copied verbatim

        Raises:
            ValueError: If ``name`` is empty
        """
        self.elements.append(PathElement(name, dict(attributes or {})))
        return self

    @classmethod
    def from_str(cls, path: str, *, target: str = "", origin: str = "") -> Path:
        """Build a path from slash shorthand.

        Every non-empty segment becomes one element without attributes, so
        ``"/a//b/"`` and ``"a/b"`` are the same path.
        """
        result = cls(target=target, origin=origin)
        for segment in path.split(SEPARATOR):
            if segment:
                result.push(segment)
        return result

    @classmethod
    def from_proto(cls, proto: gnmi_pb2.Path) -> Path:
        """Build a path from its wire form.

        Raises:
            ValueError: If any element of ``proto`` has an empty name
        """
        return cls(
            target=proto.target,
            origin=proto.origin,
            elements=[PathElement.from_proto(elem) for elem in proto.elem],
        )

    def to_proto(self) -> gnmi_pb2.Path:
        return gnmi_pb2.Path(
            target=self.target,
            origin=self.origin,
            elem=[element.to_proto() for element in self.elements],
        )

    def __len__(self) -> int:
        return len(self.elements)

    def __str__(self) -> str:
        parts = []
        for element in self.elements:
            keys = "".join(f"[{k}={v}]" for k, v in element.attributes.items())
            parts.append(f"{element.name}{keys}")
        return SEPARATOR + SEPARATOR.join(parts)


def to_path(path: str | Path) -> gnmi_pb2.Path:
    """Convert shorthand or a structural ``Path`` to its wire form."""
    if isinstance(path, Path):
        return path.to_proto()
    return Path.from_str(path).to_proto()
