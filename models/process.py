"""
Process model for the RAG Deadlock Detector.

Represents a process node of the Resource Allocation Graph.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Process:
    """
    A process in the Resource Allocation Graph.
    
    Attributes:
        index: Dense 0-based identifier assigned at creation (never reused)
        name: Unique, non-empty display name
    """
    index: int
    name: str

    def __post_init__(self):
        """Validate process identity."""
        if self.index < 0:
            raise ValueError(f"Process index cannot be negative: {self.index}")
        if not self.name or not self.name.strip():
            raise ValueError("Process name must be non-empty")

    @property
    def label(self) -> str:
        """Short label used in graph dumps (P0, P1, ...)."""
        return f"P{self.index}"

    def __str__(self) -> str:
        return f"{self.label} ({self.name})"
