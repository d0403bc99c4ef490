"""
GTN Registry: top-level directory of GSN root nodes.

Entries are keyed by the composite key "<springname>__<geosub>", so one
node can be root for several geosubs but only once for each.

Root entries keep host, address, service and key only. Nodes rebuilt from
them always read state UNSPECIFIED and role UNKNOWN.
"""

import logging
import threading
from typing import Iterator, List, Optional, Tuple

from .config import NetspaceConfig
from .models import (
    ROOT_KEY_SEPARATOR,
    NodeRecord,
    RootRegistration,
    from_store,
    root_key,
)
from .storage import KeyValueStore


logger = logging.getLogger(__name__)


class GtnRegistry:
    """
    Registry of which nodes are roots of which GSNs.

    Thread-safe implementation using locks.
    """

    def __init__(self, store: KeyValueStore, config: Optional[NetspaceConfig] = None):
        """
        Initialize GTN Registry.

        Args:
            store: Backing key-value store (composite key -> root entry).
            config: Netspace configuration. Defaults to live mode.
        """
        self.store = store
        self.config = config or NetspaceConfig()
        self._lock = threading.RLock()

    def _entries(self) -> Iterator[Tuple[str, RootRegistration]]:
        for composite_key, value in self.store.all().items():
            yield composite_key, from_store(RootRegistration, composite_key, value)

    # =========================================================================
    # Registration
    # =========================================================================

    def register_root(self, node: NodeRecord, geosub: str) -> bool:
        """
        Register a node as root of a geosub.

        The entry starts with priority DISABLED.

        Args:
            node: The node to register as root.
            geosub: Name of the GSN the node is root for.

        Returns:
            True if added, False if the node is already root of the geosub
            or the names cannot form an unambiguous composite key.
        """
        if not geosub:
            logger.warning(f"Cannot register root {node.springname}: empty geosub")
            return False

        if ROOT_KEY_SEPARATOR in geosub or ROOT_KEY_SEPARATOR in node.springname:
            logger.warning(
                f"Cannot register root {node.springname} for '{geosub}': "
                f"names must not contain '{ROOT_KEY_SEPARATOR}'"
            )
            return False

        key = root_key(node.springname, geosub)

        with self._lock:
            if self.store.get(key) is not None:
                logger.warning(f"Cannot register root: {node.springname} already root of '{geosub}'")
                return False

            registration = RootRegistration.from_node(node, geosub)
            self.store.set(key, registration.to_store())

        logger.info(f"Root registered: {node.springname} for geosub '{geosub}'")
        return True

    def unregister_root(self, node: NodeRecord, geosub: str) -> bool:
        """
        Remove a node as root of a geosub.

        Returns:
            True if removed, False if it was not registered.
        """
        key = root_key(node.springname, geosub)

        with self._lock:
            if self.store.get(key) is None:
                logger.warning(f"Cannot unregister root: {node.springname} is not root of '{geosub}'")
                return False

            self.store.delete(key)

        logger.info(f"Root unregistered: {node.springname} from geosub '{geosub}'")
        return True

    # =========================================================================
    # Query
    # =========================================================================

    def roots_of(self, geosub: str) -> List[NodeRecord]:
        """
        Get the root nodes of a GSN.

        Returns:
            Rebuilt nodes in store order; empty list if there are none.
        """
        return [
            registration.to_node(composite_key)
            for composite_key, registration in self._entries()
            if registration.geosub == geosub
        ]

    def root_by_identity(self, springname: str, geosub: str) -> Optional[NodeRecord]:
        """
        Get a root node of a GSN by its springname.

        Returns:
            NodeRecord if found, None otherwise.
        """
        key = root_key(springname, geosub)
        value = self.store.get(key)
        if value is None:
            return None
        return from_store(RootRegistration, key, value).to_node(key)

    def registrations_of(self, geosub: str) -> List[RootRegistration]:
        """Get the stored root entries of a GSN, priority included."""
        return [
            registration
            for _, registration in self._entries()
            if registration.geosub == geosub
        ]

    def all_roots(self) -> List[NodeRecord]:
        """Get every root registration as a node, in store order."""
        return [
            registration.to_node(composite_key)
            for composite_key, registration in self._entries()
        ]

    def geosubs(self) -> List[str]:
        """Names of every GSN with at least one root, first seen first."""
        names: List[str] = []
        for _, registration in self._entries():
            if registration.geosub not in names:
                names.append(registration.geosub)
        return names

    # =========================================================================
    # Testing
    # =========================================================================

    def reset_for_testing(self) -> bool:
        """
        Remove every root entry (testing mode only).

        Returns:
            True if the store was cleared, False outside testing mode.
        """
        if not self.config.testing:
            logger.warning("reset_for_testing refused: not in testing mode")
            return False

        with self._lock:
            self.store.clear()

        logger.info("GTN registry reset")
        return True
