"""
Deadlock Detection Algorithm for the RAG Deadlock Detector.

Implements Wait-For Graph cycle detection for single-instance resources:
a deadlock exists iff the Wait-For Graph contains a cycle.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from models.graph_store import GraphStore
from analysis.events import GraphEventType
from algorithms.wait_for import build_wait_for_graph, wait_for_edges
from algorithms.explainer import CycleLink, explain_cycle, format_cycle


class NodeState(Enum):
    """DFS state of a Wait-For Graph node during one detection pass."""
    UNVISITED = "UNVISITED"
    ON_STACK = "ON_STACK"
    SETTLED = "SETTLED"


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of a detection pass.

    Attributes:
        cycle: Process indices of the first cycle found, in encounter order
            (the last process waits on the first); empty if no deadlock
        links: Witness resource for every wait in the cycle
    """
    cycle: Tuple[int, ...] = ()
    links: Tuple[CycleLink, ...] = ()

    @property
    def deadlock_exists(self) -> bool:
        return len(self.cycle) > 0


NO_CYCLE = DetectionResult()


def find_cycle(wfg: np.ndarray) -> List[int]:
    """
    Find the first cycle in a Wait-For Graph using depth-first search.

    Algorithm:
    1. Visit roots in ascending index order, skipping SETTLED nodes
    2. Mark a node ON_STACK when entered, explore out-edges in ascending order
    3. Edge to an ON_STACK node: the cycle is the stack from that node to the top
    4. All out-edges explored: mark SETTLED and pop

    The traversal uses an explicit stack, so chain length is not limited by
    the interpreter recursion limit. The fixed visiting order makes the
    reported cycle deterministic.

    Time Complexity: O(P²) on an adjacency matrix

    Args:
        wfg: Boolean adjacency matrix [P][P]

    Returns:
        Process indices forming the cycle, or [] if the graph is acyclic
    """
    num_nodes = wfg.shape[0]
    state = [NodeState.UNVISITED] * num_nodes

    for root in range(num_nodes):
        if state[root] != NodeState.UNVISITED:
            continue
        cycle = _search_from(root, wfg, state)
        if cycle:
            return cycle

    return []


def _search_from(root: int, wfg: np.ndarray, state: List[NodeState]) -> List[int]:
    """Run one DFS tree from root; return the first cycle found or []."""
    stack = [root]
    # Remaining out-edges of each stack frame, in ascending target order
    pending = [iter(np.flatnonzero(wfg[root]))]
    state[root] = NodeState.ON_STACK

    while stack:
        for target in pending[-1]:
            target = int(target)
            if state[target] == NodeState.UNVISITED:
                state[target] = NodeState.ON_STACK
                stack.append(target)
                pending.append(iter(np.flatnonzero(wfg[target])))
                break
            if state[target] == NodeState.ON_STACK:
                return stack[stack.index(target):]
        else:
            state[stack.pop()] = NodeState.SETTLED
            pending.pop()

    return []


def detect_deadlock(store: GraphStore, logger=None) -> DetectionResult:
    """
    Detect a deadlock in the current graph.

    Rebuilds the Wait-For Graph from the store, searches it for the first
    cycle and maps every wait back to a witness resource.

    Four Deadlock Conditions Manifested:
    - Mutual Exclusion: every resource has at most one holder
    - Hold and Wait: a process holds resources while having request edges
    - No Preemption: allocations change only by explicit store operations
    - Circular Wait: a cycle in the Wait-For Graph

    Args:
        store: Current graph store (read only, apart from its event log)
        logger: Optional DetectorLogger for the result

    Returns:
        DetectionResult; NO_CYCLE when there is no deadlock

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 8: Deadlocks.
    """
    wfg = build_wait_for_graph(store)
    if logger:
        edges = ", ".join(f"P{p1}->P{p2}" for p1, p2 in wait_for_edges(wfg))
        logger.log(f"Wait-For Graph edges: [{edges}]", "debug")

    cycle = find_cycle(wfg)
    if not cycle:
        if logger:
            logger.log_no_deadlock()
        return NO_CYCLE

    links = explain_cycle(store, cycle)
    trace = format_cycle(store, links)
    store.event_log.record(GraphEventType.DEADLOCK, message=trace)
    if logger:
        logger.log_deadlock(trace)

    return DetectionResult(cycle=tuple(cycle), links=tuple(links))
