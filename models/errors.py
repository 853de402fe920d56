"""
Error hierarchy for the RAG Deadlock Detector.

Every graph operation validates its arguments before mutating state, so any
of these errors leaves the graph store exactly as it was.
"""


class GraphError(Exception):
    """Base class for recoverable graph store errors."""
    pass


class DuplicateNameError(GraphError):
    """A process or resource with this name already exists."""
    pass


class CapacityExceededError(GraphError):
    """The store already holds the maximum number of entities of this kind."""
    pass


class InvalidIndexError(GraphError, IndexError):
    """A process or resource index does not refer to an existing entity."""
    pass


class EdgeExistsError(GraphError):
    """The request or allocation edge is already present."""
    pass


class EdgeNotFoundError(GraphError):
    """The request or allocation edge to remove is not present."""
    pass
