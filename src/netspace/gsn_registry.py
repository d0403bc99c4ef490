"""
GSN Registry: local directory of peer nodes in the geo-subnetwork.

Entries are keyed by springname. There are no secondary indices: every
query other than find_by_identity scans the whole store in store order.

Lookups return None (or an empty list) when nothing matches; register,
unregister and update return False when rejected. Store failures
(StoreError) propagate.
"""

import logging
import threading
from typing import Iterable, Iterator, List, Optional, Tuple

from .config import NetspaceConfig
from .errors import NodeValidationError
from .models import GsnEntry, NodeRecord, NodeState, from_store
from .storage import KeyValueStore


logger = logging.getLogger(__name__)


class GsnRegistry:
    """
    Registry of the nodes in the local GSN.

    Provides:
    - Registration, unregistration and state updates
    - Lookup by address, hostname and springname
    - Discovery by role bits and by state

    Check-then-write sequences are serialised with a lock.
    """

    def __init__(self, store: KeyValueStore, config: Optional[NetspaceConfig] = None):
        """
        Initialize GSN Registry.

        Args:
            store: Backing key-value store (springname -> entry).
            config: Netspace configuration. Defaults to live mode.
        """
        self.store = store
        self.config = config or NetspaceConfig()
        self._lock = threading.RLock()

    # =========================================================================
    # Store access
    # =========================================================================

    def _entries(self) -> Iterator[Tuple[str, GsnEntry]]:
        for springname, value in self.store.all().items():
            yield springname, from_store(GsnEntry, springname, value)

    def _get_entry(self, springname: str) -> Optional[GsnEntry]:
        value = self.store.get(springname)
        return from_store(GsnEntry, springname, value) if value is not None else None

    # =========================================================================
    # Query
    # =========================================================================

    def find_by_address(self, address: str) -> Optional[NodeRecord]:
        """
        Get the first node with the given address.

        Returns:
            NodeRecord if found, None otherwise.
        """
        for springname, entry in self._entries():
            if entry.address == address:
                return entry.to_node(springname)
        return None

    def find_by_hostname(self, host: str) -> Optional[NodeRecord]:
        """
        Get the first node with the given hostname.

        Returns:
            NodeRecord if found, None otherwise.
        """
        for springname, entry in self._entries():
            if entry.host == host:
                return entry.to_node(springname)
        return None

    def find_by_identity(self, springname: str) -> Optional[NodeRecord]:
        """
        Get a node by its springname.

        Returns:
            NodeRecord if found, None otherwise.
        """
        entry = self._get_entry(springname)
        return entry.to_node(springname) if entry else None

    def find_by_role(self, mask: int) -> List[NodeRecord]:
        """
        Get all nodes holding any of the role bits in mask.

        Args:
            mask: NodeRole bitfield.

        Returns:
            Matching nodes in store order.
        """
        return [
            entry.to_node(springname)
            for springname, entry in self._entries()
            if int(entry.role) & int(mask)
        ]

    def find_by_state(self, state: NodeState) -> List[NodeRecord]:
        """Get all nodes in exactly the given state."""
        return [
            entry.to_node(springname)
            for springname, entry in self._entries()
            if entry.state == state
        ]

    def list_all(self) -> List[NodeRecord]:
        """Get every node in the GSN."""
        return [entry.to_node(springname) for springname, entry in self._entries()]

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, node: NodeRecord) -> bool:
        """
        Register a new node.

        The node is stored DISABLED whatever state it was given with.

        Returns:
            True if registered, False if the springname or the hostname
            is already registered.
        """
        with self._lock:
            if self.store.get(node.springname) is not None:
                logger.warning(f"Cannot register: springname '{node.springname}' already registered")
                return False

            if self.find_by_hostname(node.host) is not None:
                logger.warning(f"Cannot register {node.springname}: host '{node.host}' already registered")
                return False

            entry = GsnEntry.from_node(node)
            entry.state = NodeState.DISABLED
            self.store.set(node.springname, entry.to_store())

        logger.info(
            f"Node registered: {node.springname} "
            f"(host={node.host}, address={node.address}, role={int(node.role)})"
        )
        return True

    def unregister(self, node: NodeRecord) -> bool:
        """
        Remove a node from the GSN.

        Some node must be registered at node.host; it does not have to be
        this node.

        Returns:
            True if removed, False if the springname or host is unknown.
        """
        with self._lock:
            if self.store.get(node.springname) is None:
                logger.warning(f"Cannot unregister: node '{node.springname}' not found")
                return False

            if self.find_by_hostname(node.host) is None:
                logger.warning(f"Cannot unregister {node.springname}: no node at host '{node.host}'")
                return False

            self.store.delete(node.springname)

        logger.info(f"Node unregistered: {node.springname}")
        return True

    def update(self, node: NodeRecord) -> bool:
        """
        Set the state of a registered node to node.state.

        Only the state is taken from node; every other stored field is kept.

        Returns:
            True if updated, False if the node is not registered.
        """
        with self._lock:
            entry = self._get_entry(node.springname)
            if entry is None:
                logger.warning(f"Cannot update: node '{node.springname}' not found")
                return False

            entry.state = node.state
            self.store.set(node.springname, entry.to_store())

        logger.info(f"Node updated: {node.springname} (state={node.state.name})")
        return True

    # =========================================================================
    # Textual descriptions
    # =========================================================================

    def register_from_str(self, text: str) -> bool:
        """
        Parse a node description and register it.

        Returns:
            False if the description is malformed or registration is
            rejected; True otherwise.
        """
        try:
            node = NodeRecord.from_str(text)
        except NodeValidationError as e:
            logger.warning(f"Rejected node description: {e}")
            return False
        return self.register(node)

    def register_many(self, lines: Iterable[str]) -> Tuple[List[Tuple[str, bool]], List[str]]:
        """
        Register a batch of node descriptions.

        Every non-blank line is validated before anything is written; one
        malformed line rejects the whole batch. Only the line terminator is
        removed, so the fields are parsed exactly as from_str() sees them.

        Args:
            lines: Node descriptions, one per item.

        Returns:
            ([(springname, registration result)] in input order, validation
            errors). When errors is non-empty nothing was registered.
        """
        nodes = []
        errors = []

        for lineno, line in enumerate(lines, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            try:
                nodes.append(NodeRecord.from_str(line))
            except NodeValidationError as e:
                errors.append(f"line {lineno}: {e}")

        if errors:
            logger.warning(f"Bulk registration rejected: {len(errors)} malformed line(s)")
            return [], errors

        results = [(node.springname, self.register(node)) for node in nodes]

        registered = sum(1 for _, ok in results if ok)
        logger.info(f"Bulk registration: {registered}/{len(results)} nodes registered")
        return results, []

    # =========================================================================
    # Testing
    # =========================================================================

    def update_address_for_testing(self, node: NodeRecord) -> bool:
        """
        Replace the stored address of a node (testing mode only).

        Returns:
            True if updated, False outside testing mode or if not registered.
        """
        if not self.config.testing:
            logger.warning("update_address_for_testing refused: not in testing mode")
            return False

        with self._lock:
            entry = self._get_entry(node.springname)
            if entry is None:
                return False

            entry.address = node.address
            self.store.set(node.springname, entry.to_store())

        logger.debug(f"Address of {node.springname} set to {node.address}")
        return True

    def reset_for_testing(self) -> bool:
        """
        Remove every node (testing mode only).

        Returns:
            True if the store was cleared, False outside testing mode.
        """
        if not self.config.testing:
            logger.warning("reset_for_testing refused: not in testing mode")
            return False

        with self._lock:
            self.store.clear()

        logger.info("GSN registry reset")
        return True
