"""
Resource model for the RAG Deadlock Detector.

Represents a single-instance resource node of the Resource Allocation Graph.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Resource:
    """
    A single-instance resource in the Resource Allocation Graph.
    
    Mutual Exclusion: a resource is held by at most one process at a time.
    The holder itself is tracked by the GraphStore, not by the resource.
    
    Attributes:
        index: Dense 0-based identifier assigned at creation (never reused)
        name: Unique, non-empty display name
    """
    index: int
    name: str

    def __post_init__(self):
        """Validate resource identity."""
        if self.index < 0:
            raise ValueError(f"Resource index cannot be negative: {self.index}")
        if not self.name or not self.name.strip():
            raise ValueError("Resource name must be non-empty")

    @property
    def label(self) -> str:
        """Short label used in graph dumps (R0, R1, ...)."""
        return f"R{self.index}"

    def __str__(self) -> str:
        return f"{self.label} ({self.name})"
