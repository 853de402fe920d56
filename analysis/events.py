"""
Event Model for the RAG Deadlock Detector.

Defines event types for tracking graph mutations and their side effects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GraphEventType(Enum):
    """Types of events recorded by the graph store."""
    PROCESS_ADDED = "process_added"
    RESOURCE_ADDED = "resource_added"
    REQUEST_ADDED = "request_added"
    REQUEST_REMOVED = "request_removed"
    ALLOCATION_ADDED = "allocation_added"
    ALLOCATION_REMOVED = "allocation_removed"
    REVOCATION = "revocation"
    RESET = "reset"
    DEADLOCK = "deadlock"


@dataclass
class GraphEvent:
    """
    Represents a single change to the Resource Allocation Graph.
    
    Attributes:
        seq: Position of the event in the log (0-based)
        event_type: Type of event
        process: Process index involved (if applicable)
        resource: Resource index involved (if applicable)
        message: Human-readable description
    """
    seq: int
    event_type: GraphEventType
    process: Optional[int] = None
    resource: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"#{self.seq}:"

        if self.event_type == GraphEventType.PROCESS_ADDED:
            return f"{base} added P{self.process} ({self.message})"
        elif self.event_type == GraphEventType.RESOURCE_ADDED:
            return f"{base} added R{self.resource} ({self.message})"
        elif self.event_type == GraphEventType.REQUEST_ADDED:
            return f"{base} P{self.process} requests R{self.resource}"
        elif self.event_type == GraphEventType.REQUEST_REMOVED:
            return f"{base} P{self.process} no longer requests R{self.resource}"
        elif self.event_type == GraphEventType.ALLOCATION_ADDED:
            return f"{base} R{self.resource} allocated to P{self.process}"
        elif self.event_type == GraphEventType.ALLOCATION_REMOVED:
            return f"{base} R{self.resource} released by P{self.process}"
        elif self.event_type == GraphEventType.REVOCATION:
            return f"{base} R{self.resource} revoked from P{self.process} ({self.message})"
        elif self.event_type == GraphEventType.DEADLOCK:
            return f"{base} DEADLOCK DETECTED ({self.message})"
        else:
            return f"{base} {self.event_type.value}: {self.message}"


@dataclass
class EventLog:
    """Collection of graph events in the order they happened."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def record(
        self,
        event_type: GraphEventType,
        process: Optional[int] = None,
        resource: Optional[int] = None,
        message: str = ""
    ) -> GraphEvent:
        """Create the next event in sequence and add it to the log."""
        event = GraphEvent(
            seq=len(self.events),
            event_type=event_type,
            process=process,
            resource=resource,
            message=message
        )
        self.add(event)
        return event

    def add(self, event: GraphEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: GraphEventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def latest(self) -> Optional[GraphEvent]:
        """Most recent event, or None if the log is empty."""
        return self.events[-1] if self.events else None

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
