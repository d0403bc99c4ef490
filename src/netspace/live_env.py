"""
Live testing environment helpers.

Hooks used by test harnesses that drive a running node. Each one does
nothing and returns False unless the netspace is in testing mode.
"""

import logging

from .errors import NodeValidationError
from .models import NodeRecord, NodeService, split_root_line
from .netspace import Netspace

logger = logging.getLogger(__name__)


def reset_live_env(netspace: Netspace) -> bool:
    """Clear the GSN and GTN stores."""
    if not netspace.config.testing:
        return False
    return netspace.reset_for_testing()


def update_address_live_env(netspace: Netspace, nodestr: str) -> bool:
    """
    Overwrite the address of a registered node.

    Args:
        nodestr: Node description carrying the springname and new address.
    """
    if not netspace.config.testing:
        return False

    try:
        node = NodeRecord.from_str(nodestr)
    except NodeValidationError as e:
        logger.warning(f"update_address_live_env: {e}")
        return False

    return netspace.gsn.update_address_for_testing(node)


def add_geosub_root_live_env(netspace: Netspace, text: str) -> bool:
    """
    Register a node as root of a geosub.

    Args:
        text: Node description followed by ",<geosub>". The node is
            registered with service DVSP whatever the description says.
    """
    if not netspace.config.testing:
        return False

    nodestr, geosub = split_root_line(text)
    if not geosub:
        return False

    try:
        node = NodeRecord.from_str(nodestr)
    except NodeValidationError as e:
        logger.warning(f"add_geosub_root_live_env: {e}")
        return False

    node = node.model_copy(update={"service": NodeService.DVSP})
    return netspace.gtn.register_root(node, geosub)
