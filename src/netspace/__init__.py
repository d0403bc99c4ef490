"""
Netspace registry.

Directory of the nodes of a distributed node network:
- GSN (geo-subnetwork): local registry of peer nodes
- GTN (geo-topology network): which nodes are roots of which GSNs
"""

from .config import NetspaceConfig
from .errors import NetspaceError, NodeValidationError, StoreError
from .gsn_registry import GsnRegistry
from .gtn_registry import GtnRegistry
from .models import (
    GsnEntry,
    NodeRecord,
    NodeRole,
    NodeService,
    NodeState,
    RootRegistration,
    root_key,
)
from .netspace import Netspace

__all__ = [
    # Models
    "NodeRecord",
    "NodeRole",
    "NodeService",
    "NodeState",
    "GsnEntry",
    "RootRegistration",
    "root_key",
    # Registries
    "GsnRegistry",
    "GtnRegistry",
    "Netspace",
    # Config / errors
    "NetspaceConfig",
    "NetspaceError",
    "NodeValidationError",
    "StoreError",
]
