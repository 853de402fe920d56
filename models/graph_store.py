"""
Graph Store for the RAG Deadlock Detector.

Maintains the Resource Allocation Graph: processes, single-instance resources,
request edges (process -> resource) and allocation edges (resource -> process).
This is the ground truth every detection pass reads from.
"""

import numpy as np
from typing import List, Dict, Optional, Tuple
from dataclasses import dataclass

from models.process import Process
from models.resource import Resource
from models.errors import (
    DuplicateNameError,
    CapacityExceededError,
    InvalidIndexError,
    EdgeExistsError,
    EdgeNotFoundError,
)
from analysis.events import EventLog, GraphEventType

FREE = -1


@dataclass(frozen=True, eq=False)
class GraphSnapshot:
    """
    Read-only view of the graph at one point in time.

    Attributes:
        process_names: Display names indexed by process index
        resource_names: Display names indexed by resource index
        request_matrix: [P][R] bool, True where process p requests resource r
        allocation_matrix: [R][P] bool, True where resource r is held by process p
    """
    process_names: Tuple[str, ...]
    resource_names: Tuple[str, ...]
    request_matrix: np.ndarray
    allocation_matrix: np.ndarray

    @property
    def num_processes(self) -> int:
        return len(self.process_names)

    @property
    def num_resources(self) -> int:
        return len(self.resource_names)

    def request_edges(self) -> List[Tuple[int, int]]:
        """All (process, resource) request edges in index order."""
        return [(int(p), int(r)) for p, r in zip(*np.nonzero(self.request_matrix))]

    def allocation_edges(self) -> List[Tuple[int, int]]:
        """All (resource, process) allocation edges in index order."""
        return [(int(r), int(p)) for r, p in zip(*np.nonzero(self.allocation_matrix))]

    def holder_of(self, resource: int) -> Optional[int]:
        """Process holding the resource, or None if it is free."""
        holders = np.flatnonzero(self.allocation_matrix[resource])
        return int(holders[0]) if holders.size else None

    def __eq__(self, other) -> bool:
        if not isinstance(other, GraphSnapshot):
            return NotImplemented
        return (
            self.process_names == other.process_names
            and self.resource_names == other.resource_names
            and np.array_equal(self.request_matrix, other.request_matrix)
            and np.array_equal(self.allocation_matrix, other.allocation_matrix)
        )


def _read_only(matrix: np.ndarray) -> np.ndarray:
    frozen = matrix.copy()
    frozen.flags.writeable = False
    return frozen


class GraphStore:
    """
    Resource Allocation Graph with dense, never-reused indices.

    Request edges live in a [P][R] boolean matrix. Allocation edges live in a
    holder vector [R] (FREE when unallocated), so a resource can never have
    more than one holder. The [R][P] allocation matrix is derived from the
    holder vector on first access and cached until the next mutation.

    Every operation validates before it mutates: a raised GraphError leaves
    the store unchanged.
    """

    def __init__(
        self,
        max_processes: Optional[int] = None,
        max_resources: Optional[int] = None,
        logger=None,
        event_log: Optional[EventLog] = None
    ):
        """
        Initialize an empty graph.

        Args:
            max_processes: Process capacity (None = unbounded)
            max_resources: Resource capacity (None = unbounded)
            logger: Optional DetectorLogger for warnings and debug output
            event_log: Log receiving every mutation (a new one if omitted)
        """
        self.max_processes = max_processes
        self.max_resources = max_resources
        self.logger = logger
        self.event_log = event_log if event_log is not None else EventLog()
        self._clear()

    def _clear(self) -> None:
        self._processes: List[Process] = []
        self._resources: List[Resource] = []
        self._process_lookup: Dict[str, int] = {}
        self._resource_lookup: Dict[str, int] = {}
        self._request_matrix = np.zeros((0, 0), dtype=bool)
        self._holder_vector = np.zeros(0, dtype=int)
        self._allocation_matrix: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def num_processes(self) -> int:
        """Number of processes in the graph."""
        return len(self._processes)

    @property
    def num_resources(self) -> int:
        """Number of resources in the graph."""
        return len(self._resources)

    @property
    def processes(self) -> List[Process]:
        return list(self._processes)

    @property
    def resources(self) -> List[Resource]:
        return list(self._resources)

    @property
    def request_matrix(self) -> np.ndarray:
        """Get request matrix [P][R] (read-only)."""
        return _read_only(self._request_matrix)

    @property
    def holder_vector(self) -> np.ndarray:
        """Get holder vector [R]: holding process index, or FREE."""
        return _read_only(self._holder_vector)

    @property
    def allocation_matrix(self) -> np.ndarray:
        """Get allocation matrix [R][P] (read-only)."""
        if self._allocation_matrix is None:
            self._build_allocation_matrix()
        return _read_only(self._allocation_matrix)

    def _build_allocation_matrix(self) -> None:
        """Build allocation matrix from the holder vector."""
        self._allocation_matrix = np.zeros((self.num_resources, self.num_processes), dtype=bool)
        held = np.flatnonzero(self._holder_vector != FREE)
        self._allocation_matrix[held, self._holder_vector[held]] = True

    def refresh_matrices(self) -> None:
        """Drop cached derived matrices after a mutation."""
        self._allocation_matrix = None

    def has_request(self, process: int, resource: int) -> bool:
        self._check_process(process)
        self._check_resource(resource)
        return bool(self._request_matrix[process, resource])

    def holder_of(self, resource: int) -> Optional[int]:
        """Process currently holding the resource, or None if it is free."""
        self._check_resource(resource)
        holder = int(self._holder_vector[resource])
        return None if holder == FREE else holder

    def find_process(self, name: str) -> Optional[int]:
        return self._process_lookup.get(name.strip()) if isinstance(name, str) else None

    def find_resource(self, name: str) -> Optional[int]:
        return self._resource_lookup.get(name.strip()) if isinstance(name, str) else None

    def process_name(self, process: int) -> str:
        self._check_process(process)
        return self._processes[process].name

    def resource_name(self, resource: int) -> str:
        self._check_resource(resource)
        return self._resources[resource].name

    # ------------------------------------------------------------------
    # Entity creation
    # ------------------------------------------------------------------

    def add_process(self, name: str) -> int:
        """
        Add a process and return its index.

        Raises:
            ValueError: If the name is empty
            DuplicateNameError: If a process already uses this name
            CapacityExceededError: If max_processes is reached
        """
        name = _clean_name(name, "Process")
        if name in self._process_lookup:
            raise DuplicateNameError(f"Process name '{name}' already exists")
        if self.max_processes is not None and self.num_processes >= self.max_processes:
            raise CapacityExceededError(
                f"Cannot add process '{name}': capacity of {self.max_processes} reached"
            )

        index = self.num_processes
        self._processes.append(Process(index=index, name=name))
        self._process_lookup[name] = index
        self._request_matrix = np.vstack(
            [self._request_matrix, np.zeros((1, self.num_resources), dtype=bool)]
        )
        self.refresh_matrices()

        self.event_log.record(GraphEventType.PROCESS_ADDED, process=index, message=name)
        self._log(f"Added process P{index} ({name})", "debug")
        return index

    def add_resource(self, name: str) -> int:
        """
        Add a single-instance resource and return its index.

        Raises:
            ValueError: If the name is empty
            DuplicateNameError: If a resource already uses this name
            CapacityExceededError: If max_resources is reached
        """
        name = _clean_name(name, "Resource")
        if name in self._resource_lookup:
            raise DuplicateNameError(f"Resource name '{name}' already exists")
        if self.max_resources is not None and self.num_resources >= self.max_resources:
            raise CapacityExceededError(
                f"Cannot add resource '{name}': capacity of {self.max_resources} reached"
            )

        index = self.num_resources
        self._resources.append(Resource(index=index, name=name))
        self._resource_lookup[name] = index
        self._request_matrix = np.hstack(
            [self._request_matrix, np.zeros((self.num_processes, 1), dtype=bool)]
        )
        self._holder_vector = np.append(self._holder_vector, FREE)
        self.refresh_matrices()

        self.event_log.record(GraphEventType.RESOURCE_ADDED, resource=index, message=name)
        self._log(f"Added resource R{index} ({name})", "debug")
        return index

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_request_edge(self, process: int, resource: int) -> None:
        """
        Record that a process is waiting to acquire a resource.

        Raises:
            InvalidIndexError: If either index is unknown
            EdgeExistsError: If the request is already recorded
        """
        self._check_process(process)
        self._check_resource(resource)
        if self._request_matrix[process, resource]:
            raise EdgeExistsError(f"P{process} already requests R{resource}")

        self._request_matrix[process, resource] = True

        self.event_log.record(GraphEventType.REQUEST_ADDED, process=process, resource=resource)
        self._log(f"P{process} requests R{resource}", "debug")

    def add_allocation_edge(self, resource: int, process: int) -> Optional[int]:
        """
        Allocate a resource to a process.

        A resource has at most one holder, so allocating a held resource
        revokes it from the previous holder first. The revocation is logged
        as a warning and recorded in the event log.

        Returns:
            Index of the process the resource was revoked from, or None

        Raises:
            InvalidIndexError: If either index is unknown
            EdgeExistsError: If the process already holds the resource
        """
        self._check_resource(resource)
        self._check_process(process)
        previous = int(self._holder_vector[resource])
        if previous == process:
            raise EdgeExistsError(f"R{resource} is already allocated to P{process}")

        revoked = None
        if previous != FREE:
            revoked = previous
            self.event_log.record(
                GraphEventType.REVOCATION,
                process=previous,
                resource=resource,
                message=f"reallocated to P{process}"
            )
            if self.logger:
                self.logger.log_revocation(
                    self._resource_label(resource),
                    self._process_label(previous),
                    self._process_label(process)
                )

        self._holder_vector[resource] = process
        self.refresh_matrices()

        self.event_log.record(GraphEventType.ALLOCATION_ADDED, process=process, resource=resource)
        self._log(f"R{resource} allocated to P{process}", "debug")
        return revoked

    def remove_request_edge(self, process: int, resource: int) -> None:
        """
        Clear a pending request.

        Raises:
            InvalidIndexError: If either index is unknown
            EdgeNotFoundError: If the process does not request the resource
        """
        self._check_process(process)
        self._check_resource(resource)
        if not self._request_matrix[process, resource]:
            raise EdgeNotFoundError(f"P{process} does not request R{resource}")

        self._request_matrix[process, resource] = False

        self.event_log.record(GraphEventType.REQUEST_REMOVED, process=process, resource=resource)
        self._log(f"P{process} no longer requests R{resource}", "debug")

    def remove_allocation_edge(self, resource: int, process: int) -> None:
        """
        Release a resource held by a process.

        Raises:
            InvalidIndexError: If either index is unknown
            EdgeNotFoundError: If the process does not hold the resource
        """
        self._check_resource(resource)
        self._check_process(process)
        if self._holder_vector[resource] != process:
            raise EdgeNotFoundError(f"R{resource} is not allocated to P{process}")

        self._holder_vector[resource] = FREE
        self.refresh_matrices()

        self.event_log.record(GraphEventType.ALLOCATION_REMOVED, process=process, resource=resource)
        self._log(f"R{resource} released by P{process}", "debug")

    # ------------------------------------------------------------------
    # Whole-graph operations
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Remove all processes, resources and edges. Indices restart at 0."""
        self._clear()
        self.event_log.record(GraphEventType.RESET, message="graph cleared")
        self._log("Graph reset", "debug")

    def snapshot(self) -> GraphSnapshot:
        """
        Create a read-only view of the current graph.

        Returns:
            GraphSnapshot holding copies of names and edge matrices
        """
        return GraphSnapshot(
            process_names=tuple(p.name for p in self._processes),
            resource_names=tuple(r.name for r in self._resources),
            request_matrix=self.request_matrix,
            allocation_matrix=self.allocation_matrix,
        )

    def display(self) -> str:
        """
        Generate readable string representation of the graph.

        Returns:
            Formatted string listing every node and its outgoing edges
        """
        output = []
        output.append("\n" + "="*60)
        output.append("RESOURCE ALLOCATION GRAPH")
        output.append("="*60)

        # Process -> Resource (requests)
        output.append("\nProcesses (requests):")
        if not self._processes:
            output.append("  (none)")
        for process in self._processes:
            requested = np.flatnonzero(self._request_matrix[process.index])
            edges = " ".join(f"-> R{r}" for r in requested)
            output.append(f"  {process}: {edges}".rstrip())

        # Resource -> Process (allocations)
        output.append("\nResources (allocations):")
        if not self._resources:
            output.append("  (none)")
        for resource in self._resources:
            holder = int(self._holder_vector[resource.index])
            edge = "(free)" if holder == FREE else f"-> P{holder}"
            output.append(f"  {resource}: {edge}")

        output.append("\n" + "="*60)
        return "\n".join(output)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_process(self, process: int) -> None:
        if not _is_index(process) or not 0 <= process < self.num_processes:
            raise InvalidIndexError(
                f"Invalid process index {process} (have {self.num_processes})"
            )

    def _check_resource(self, resource: int) -> None:
        if not _is_index(resource) or not 0 <= resource < self.num_resources:
            raise InvalidIndexError(
                f"Invalid resource index {resource} (have {self.num_resources})"
            )

    def _process_label(self, process: int) -> str:
        return str(self._processes[process])

    def _resource_label(self, resource: int) -> str:
        return str(self._resources[resource])

    def _log(self, message: str, level: str = "info") -> None:
        if self.logger:
            self.logger.log(message, level)


def _is_index(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _clean_name(name: str, kind: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{kind} name must be a non-empty string")
    return name.strip()
