"""
Netspace: the GSN and GTN registries of one node, built from config.
"""

import logging
from typing import Any, Dict, Optional

from .config import NetspaceConfig
from .gsn_registry import GsnRegistry
from .gtn_registry import GtnRegistry
from .models import NodeState
from .storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore


logger = logging.getLogger(__name__)


class Netspace:
    """
    Owns the two registries of a node and the stores behind them.

    Usage:
        netspace = Netspace(NetspaceConfig.load())
        netspace.gsn.register(node)
        netspace.gtn.roots_of("esusx")
    """

    def __init__(self, config: Optional[NetspaceConfig] = None):
        """
        Initialize Netspace.

        Args:
            config: Netspace configuration. If None, loads it from the
                default YAML file and the environment.
        """
        self.config = config or NetspaceConfig.load()

        self.gsn = GsnRegistry(self._open_store(self.config.gsn_store_name), self.config)
        self.gtn = GtnRegistry(self._open_store(self.config.gtn_store_name), self.config)

        logger.info(
            f"Netspace initialized: backend={self.config.backend}, "
            f"store_dir={self.config.store_dir}, testing={self.config.testing}"
        )

    def _open_store(self, name: str) -> KeyValueStore:
        if self.config.backend == "memory":
            return MemoryKeyValueStore(name)
        return FileKeyValueStore(name, self.config.store_dir)

    def reset_for_testing(self) -> bool:
        """Clear both registries (testing mode only)."""
        if not self.config.testing:
            logger.warning("reset_for_testing refused: not in testing mode")
            return False
        return self.gsn.reset_for_testing() and self.gtn.reset_for_testing()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get netspace statistics.

        Returns:
            Dict with node counts by state and root information.
        """
        nodes = self.gsn.list_all()

        by_state: Dict[str, int] = {}
        for node in nodes:
            by_state[node.state.name] = by_state.get(node.state.name, 0) + 1

        return {
            "total_nodes": len(nodes),
            "enabled_nodes": by_state.get(NodeState.ENABLED.name, 0),
            "nodes_by_state": by_state,
            "root_registrations": len(self.gtn.all_roots()),
            "geosubs": self.gtn.geosubs(),
            "backend": self.config.backend,
            "store_dir": self.config.store_dir,
            "testing": self.config.testing,
        }
