"""
Cycle explanation for the RAG Deadlock Detector.

Maps every process-to-process wait of a detected cycle back to the resource
that causes it, so a deadlock can be reported as P -> R -> P -> ... chains.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from models.graph_store import GraphStore


@dataclass(frozen=True)
class CycleLink:
    """
    One wait in a deadlock cycle.
    
    Attributes:
        waiting: Process that is blocked
        resource: Witness resource requested by `waiting` and held by
            `holder` (None if the graph no longer contains one)
        holder: Process holding the witness resource
    """
    waiting: int
    resource: Optional[int]
    holder: int


def find_witness(store: GraphStore, waiting: int, holder: int) -> Optional[int]:
    """
    Find the lowest-index resource requested by `waiting` and held by `holder`.
    
    Args:
        store: Graph store to query
        waiting: Blocked process index
        holder: Holding process index
        
    Returns:
        Resource index, or None if no resource links the two processes
        (including when either process is no longer in the store)
    """
    if not (0 <= waiting < store.num_processes and 0 <= holder < store.num_processes):
        return None

    requested = store.request_matrix[waiting]
    held = store.holder_vector == holder
    candidates = np.flatnonzero(requested & held)
    return int(candidates[0]) if candidates.size else None


def explain_cycle(store: GraphStore, cycle: Sequence[int]) -> List[CycleLink]:
    """
    Attach a witness resource to every link of a cycle.
    
    The cycle [p0, p1, ..., pk] is closed: pk waits on p0. A link with no
    witness (the store changed since the cycle was found) is reported with
    resource=None instead of failing.
    
    Args:
        store: Graph store the cycle was detected on
        cycle: Process indices in encounter order
        
    Returns:
        One CycleLink per process in the cycle
    """
    links = []
    for position, waiting in enumerate(cycle):
        holder = cycle[(position + 1) % len(cycle)]
        links.append(CycleLink(
            waiting=int(waiting),
            resource=find_witness(store, waiting, holder),
            holder=int(holder)
        ))
    return links


def format_cycle(store: GraphStore, links: Sequence[CycleLink]) -> str:
    """
    Render a cycle as "P0 (a) -> R0 (x) -> P1 (b) -> ... -> P0 (a)".
    
    Args:
        store: Graph store supplying display names
        links: Explained cycle
        
    Returns:
        Human-readable cycle trace ('?' marks a link without witness)
    """
    if not links:
        return ""

    parts = []
    for link in links:
        parts.append(f"P{link.waiting} ({store.process_name(link.waiting)})")
        if link.resource is None:
            parts.append("?")
        else:
            parts.append(f"R{link.resource} ({store.resource_name(link.resource)})")
    first = links[0].waiting
    parts.append(f"P{first} ({store.process_name(first)})")
    return " -> ".join(parts)
