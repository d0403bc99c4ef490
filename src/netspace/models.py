"""
Pydantic models for the netspace registry.

This module provides:
- NodeService / NodeState / NodeRole enums
- NodeRecord: one network participant (GSN entry as seen by callers)
- GsnEntry: stored payload of a GSN entry (keyed by springname)
- RootRegistration: stored payload of a GTN entry (keyed by composite key)

Textual node description (bulk registration):
    springname,host,address,service,state,role,key
"""

from enum import IntEnum, IntFlag
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import NodeValidationError, StoreError


# Separator between springname and geosub in GTN composite keys
ROOT_KEY_SEPARATOR = "__"

NODE_STR_FIELDS = ("springname", "host", "address", "service", "state", "role", "key")


# =============================================================================
# Enums
# =============================================================================

class NodeService(IntEnum):
    """Protocol/service exposed by a node."""
    UNSPECIFIED = 0
    DVSP = 1
    HTTP = 2


class NodeState(IntEnum):
    """Operational state of a node (also used as GTN root priority)."""
    UNSPECIFIED = 0
    DISABLED = 1
    ENABLED = 2
    ELEVATED = 3
    UNRESPONSIVE = 4


class NodeRole(IntFlag):
    """Capability bits. A node may hold several roles at once."""
    UNKNOWN = 0
    HUB = 1
    ORG = 2
    HYBRID = HUB | ORG


_ALL_ROLE_BITS = int(NodeRole.HYBRID)


def _coerce_role(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, NodeRole):
        return NodeRole(value)
    return value


# =============================================================================
# NodeRecord
# =============================================================================

class NodeRecord(BaseModel):
    """
    One node in the netspace.

    The springname is the identity of the node and never changes once the
    node is registered; address and state are the mutable parts.
    """
    springname: str = Field(..., min_length=1, description="Globally unique node identity")
    host: str = Field(..., description="Hostname of the node")
    address: str = Field(default="", description="Network (IP) address")
    service: NodeService = Field(default=NodeService.UNSPECIFIED, description="Exposed service")
    state: NodeState = Field(default=NodeState.UNSPECIFIED, description="Operational state")
    role: NodeRole = Field(default=NodeRole.UNKNOWN, description="Role bitfield")
    key: str = Field(default="", description="Opaque credential token")

    @field_validator("role", mode="before")
    @classmethod
    def _role_from_int(cls, value: Any) -> Any:
        return _coerce_role(value)

    def has_role(self, mask: int) -> bool:
        """Check if any bit of the mask is held by this node."""
        return (int(self.role) & int(mask)) != 0

    # -------------------------------------------------------------------------
    # Textual form
    # -------------------------------------------------------------------------

    def to_str(self) -> str:
        """Serialize to the canonical comma-separated description."""
        return ",".join([
            self.springname,
            self.host,
            self.address,
            str(int(self.service)),
            str(int(self.state)),
            str(int(self.role)),
            self.key,
        ])

    @classmethod
    def from_str(cls, text: str) -> "NodeRecord":
        """
        Parse a comma-separated node description.

        Args:
            text: "springname,host,address,service,state,role,key"

        Returns:
            NodeRecord

        Raises:
            NodeValidationError: Wrong field count, empty identity/host or
                an enum value outside its domain.
        """
        parts = text.split(",")
        if len(parts) != len(NODE_STR_FIELDS):
            raise NodeValidationError(
                f"Expected {len(NODE_STR_FIELDS)} fields, got {len(parts)}: {text!r}"
            )

        springname, host, address, service, state, role, key = parts

        if not springname:
            raise NodeValidationError(f"Empty springname: {text!r}")
        if not host:
            raise NodeValidationError(f"Empty host: {text!r}")

        return cls(
            springname=springname,
            host=host,
            address=address,
            service=_parse_enum(NodeService, "service", service),
            state=_parse_enum(NodeState, "state", state),
            role=_parse_role(role),
            key=key,
        )


def _parse_int(field: str, raw: str) -> int:
    # int() would also accept " 1" and "+1", which do not survive a round trip
    if not (raw.isascii() and raw.isdigit()):
        raise NodeValidationError(f"Invalid {field} value: {raw!r}")
    return int(raw)


def _parse_enum(enum_cls, field: str, raw: str):
    value = _parse_int(field, raw)
    try:
        return enum_cls(value)
    except ValueError:
        raise NodeValidationError(f"Unknown {field}: {value}") from None


def _parse_role(raw: str) -> NodeRole:
    value = _parse_int("role", raw)
    if value & ~_ALL_ROLE_BITS:
        raise NodeValidationError(f"Unknown role bits: {value}")
    return NodeRole(value)


# =============================================================================
# Stored payloads
# =============================================================================

class GsnEntry(BaseModel):
    """
    GSN entry as persisted in the store (springname is the store key).
    """
    host: str
    address: str
    service: NodeService
    state: NodeState
    role: NodeRole
    key: str

    @field_validator("role", mode="before")
    @classmethod
    def _role_from_int(cls, value: Any) -> Any:
        return _coerce_role(value)

    @classmethod
    def from_node(cls, node: NodeRecord) -> "GsnEntry":
        return cls(
            host=node.host,
            address=node.address,
            service=node.service,
            state=node.state,
            role=node.role,
            key=node.key,
        )

    def to_node(self, springname: str) -> NodeRecord:
        return NodeRecord(
            springname=springname,
            host=self.host,
            address=self.address,
            service=self.service,
            state=self.state,
            role=self.role,
            key=self.key,
        )

    def to_store(self) -> Dict[str, Any]:
        """Plain mapping with enums as integers."""
        return {
            "host": self.host,
            "address": self.address,
            "service": int(self.service),
            "state": int(self.state),
            "role": int(self.role),
            "key": self.key,
        }


class RootRegistration(BaseModel):
    """
    GTN entry: a node acting as root of one geosub.

    Stored under root_key(springname, geosub). Does not keep the node's
    state or role.
    """
    host: str
    address: str
    service: NodeService
    priority: NodeState = Field(default=NodeState.DISABLED, description="Root priority")
    geosub: str = Field(..., min_length=1, description="Name of the GSN this node is root for")
    key: str

    @classmethod
    def from_node(cls, node: NodeRecord, geosub: str) -> "RootRegistration":
        return cls(
            host=node.host,
            address=node.address,
            service=node.service,
            priority=NodeState.DISABLED,
            geosub=geosub,
            key=node.key,
        )

    def to_node(self, composite_key: str) -> NodeRecord:
        """
        Rebuild a NodeRecord from a stored root entry.

        State and role are not stored for roots, so the rebuilt node always
        reads UNSPECIFIED / UNKNOWN.
        """
        return NodeRecord(
            springname=springname_of(composite_key),
            host=self.host,
            address=self.address,
            service=self.service,
            state=NodeState.UNSPECIFIED,
            role=NodeRole.UNKNOWN,
            key=self.key,
        )

    def to_store(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "address": self.address,
            "service": int(self.service),
            "priority": int(self.priority),
            "geosub": self.geosub,
            "key": self.key,
        }


# =============================================================================
# Composite keys
# =============================================================================

def root_key(springname: str, geosub: str) -> str:
    """GTN composite key for a (node, geosub) pair."""
    return f"{springname}{ROOT_KEY_SEPARATOR}{geosub}"


def springname_of(composite_key: str) -> str:
    """Recover the springname from a GTN composite key."""
    return composite_key.split(ROOT_KEY_SEPARATOR)[0]


def split_root_line(text: str) -> Tuple[str, Optional[str]]:
    """
    Split "<node description>,<geosub>" into its two parts.

    Returns:
        (node description, geosub); geosub is None when there is no comma.
    """
    if "," not in text:
        return text, None
    node_str, geosub = text.rsplit(",", 1)
    return node_str, geosub


def from_store(model_cls, key: str, value: Any):
    """
    Build a stored payload model from a raw store value.

    Raises:
        StoreError: If the stored value does not fit the model.
    """
    try:
        return model_cls(**value)
    except (ValidationError, TypeError) as e:
        raise StoreError(f"Corrupt {model_cls.__name__} under key '{key}': {e}") from e
