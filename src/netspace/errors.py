"""
Netspace error taxonomy.

NotFound and Conflict are not exceptions: registries return None / False for
them. Only malformed input and broken stores raise.
"""


class NetspaceError(Exception):
    """Base class for all netspace errors."""


class NodeValidationError(NetspaceError, ValueError):
    """A textual node description could not be parsed."""


class StoreError(NetspaceError):
    """The backing key-value store failed (I/O error, corrupt data)."""
