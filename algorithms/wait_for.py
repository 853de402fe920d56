"""
Wait-For Graph construction for the RAG Deadlock Detector.

Collapses the bipartite Resource Allocation Graph into a process-to-process
graph: P1 -> P2 means P1 requests some resource currently held by P2.
"""

import numpy as np
from typing import List, Tuple

from models.graph_store import GraphStore


def build_wait_for_graph(store: GraphStore) -> np.ndarray:
    """
    Derive the Wait-For Graph from current request and allocation edges.
    
    WFG[p1][p2] = OR over r of (Request[p1][r] AND Allocation[r][p2])
    
    which is the boolean matrix product Request [P][R] x Allocation [R][P].
    A process requesting a resource it already holds gets a self-loop.
    
    Time Complexity: O(P×R×P)
    
    Args:
        store: Graph store to read (never modified)
        
    Returns:
        Boolean adjacency matrix [P][P]
    """
    request = store.request_matrix.astype(np.int64)
    allocation = store.allocation_matrix.astype(np.int64)
    return (request @ allocation) > 0


def wait_for_edges(wfg: np.ndarray) -> List[Tuple[int, int]]:
    """
    List Wait-For Graph edges in ascending (waiting, holder) order.
    
    Args:
        wfg: Boolean adjacency matrix [P][P]
        
    Returns:
        List of (waiting process, holding process) pairs
    """
    return [(int(p1), int(p2)) for p1, p2 in zip(*np.nonzero(wfg))]
