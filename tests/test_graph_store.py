"""
Graph Store Tests

Tests Process, Resource and GraphStore behaviour: dense indexing, name
uniqueness, capacity limits, edge bookkeeping, revocation and reset.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.process import Process
from models.resource import Resource
from models.graph_store import GraphStore
from models.errors import (
    GraphError,
    DuplicateNameError,
    CapacityExceededError,
    InvalidIndexError,
    EdgeExistsError,
    EdgeNotFoundError,
)
from analysis.events import GraphEventType
from utils.logger import DetectorLogger


def _two_by_two() -> GraphStore:
    store = GraphStore()
    store.add_process("editor")
    store.add_process("backup")
    store.add_resource("disk")
    store.add_resource("printer")
    return store


def test_process_and_resource_records():
    """Records carry index, name and a short label."""
    process = Process(index=3, name="editor")
    resource = Resource(index=0, name="disk")
    assert process.label == "P3"
    assert str(resource) == "R0 (disk)"

    for bad in ("", "   "):
        try:
            Process(index=0, name=bad)
            assert False, "Blank process name should be rejected"
        except ValueError:
            pass


def test_indices_are_dense_and_increasing():
    """Indices start at 0 and increase by one per kind."""
    store = GraphStore()
    process_indices = [store.add_process(f"p{i}") for i in range(5)]
    resource_indices = [store.add_resource(f"r{i}") for i in range(3)]

    assert process_indices == [0, 1, 2, 3, 4]
    assert resource_indices == [0, 1, 2]
    assert store.num_processes == 5
    assert store.num_resources == 3
    assert store.request_matrix.shape == (5, 3)
    assert store.allocation_matrix.shape == (3, 5)
    print("  ✓ Dense 0-based indices")


def test_names_are_unique_per_kind():
    """A name may be reused across kinds but not within one."""
    store = GraphStore()
    store.add_process("shared")
    store.add_resource("shared")

    try:
        store.add_process("shared")
        assert False, "Duplicate process name should be rejected"
    except DuplicateNameError:
        pass

    try:
        store.add_resource("shared")
        assert False, "Duplicate resource name should be rejected"
    except DuplicateNameError:
        pass

    assert store.num_processes == 1
    assert store.num_resources == 1
    assert store.find_process("shared") == 0
    assert store.find_resource("missing") is None


def test_blank_name_rejected():
    store = GraphStore()
    try:
        store.add_process("  ")
        assert False, "Blank name should be rejected"
    except ValueError:
        pass
    assert store.num_processes == 0


def test_capacity_limits():
    """Adding beyond the configured capacity fails without side effects."""
    store = GraphStore(max_processes=2, max_resources=1)
    store.add_process("a")
    store.add_process("b")
    store.add_resource("x")

    try:
        store.add_process("c")
        assert False, "Process capacity should be enforced"
    except CapacityExceededError:
        pass

    try:
        store.add_resource("y")
        assert False, "Resource capacity should be enforced"
    except CapacityExceededError:
        pass

    assert store.num_processes == 2
    assert store.num_resources == 1
    assert store.find_process("c") is None


def test_unbounded_by_default():
    store = GraphStore()
    for i in range(200):
        store.add_process(f"proc-{i}")
    assert store.num_processes == 200


def test_request_edges():
    """Request edges are set once and removed once."""
    store = _two_by_two()
    store.add_request_edge(0, 1)
    assert store.has_request(0, 1)
    assert not store.has_request(1, 1)

    try:
        store.add_request_edge(0, 1)
        assert False, "Duplicate request should be rejected"
    except EdgeExistsError:
        pass

    store.remove_request_edge(0, 1)
    assert not store.has_request(0, 1)

    try:
        store.remove_request_edge(0, 1)
        assert False, "Removing a missing request should fail"
    except EdgeNotFoundError:
        pass


def test_many_processes_may_request_one_resource():
    store = _two_by_two()
    store.add_request_edge(0, 0)
    store.add_request_edge(1, 0)
    assert store.snapshot().request_edges() == [(0, 0), (1, 0)]


def test_allocation_edges():
    """Allocation edges track a single holder per resource."""
    store = _two_by_two()
    assert store.holder_of(0) is None

    revoked = store.add_allocation_edge(0, 1)
    assert revoked is None
    assert store.holder_of(0) == 1
    assert store.allocation_matrix[0, 1]

    try:
        store.add_allocation_edge(0, 1)
        assert False, "Duplicate allocation should be rejected"
    except EdgeExistsError:
        pass

    try:
        store.remove_allocation_edge(0, 0)
        assert False, "P0 does not hold R0"
    except EdgeNotFoundError:
        pass

    store.remove_allocation_edge(0, 1)
    assert store.holder_of(0) is None
    assert not store.allocation_matrix.any()


def test_allocation_override_revokes_previous_holder(capsys):
    """Allocating a held resource moves it and reports the revocation."""
    store = GraphStore(logger=DetectorLogger())
    store.add_process("editor")
    store.add_process("backup")
    store.add_resource("disk")

    store.add_allocation_edge(0, 0)
    revoked = store.add_allocation_edge(0, 1)

    assert revoked == 0
    assert store.holder_of(0) == 1
    assert store.snapshot().allocation_edges() == [(0, 1)]
    assert int(store.allocation_matrix[0].sum()) == 1

    revocations = store.event_log.get_events_by_type(GraphEventType.REVOCATION)
    assert len(revocations) == 1
    assert revocations[0].process == 0
    assert revocations[0].resource == 0

    output = capsys.readouterr().out
    assert "[WARNING] R0 (disk) revoked from P0 (editor), now held by P1 (backup)" in output
    print("  ✓ Revocation reported")


def test_invalid_indices():
    """Unknown indices raise InvalidIndexError (also an IndexError)."""
    store = _two_by_two()
    calls = [
        lambda: store.add_request_edge(2, 0),
        lambda: store.add_request_edge(0, 2),
        lambda: store.add_request_edge(-1, 0),
        lambda: store.add_allocation_edge(5, 0),
        lambda: store.add_allocation_edge(0, 9),
        lambda: store.remove_request_edge(0, 7),
        lambda: store.remove_allocation_edge(True, 0),
        lambda: store.holder_of(2),
        lambda: store.process_name(2),
    ]
    for call in calls:
        try:
            call()
            assert False, "Invalid index should be rejected"
        except InvalidIndexError as e:
            assert isinstance(e, IndexError)
            assert isinstance(e, GraphError)


def test_failed_operations_leave_graph_unchanged():
    """Every rejected operation is all-or-nothing."""
    store = _two_by_two()
    store.add_request_edge(0, 0)
    store.add_allocation_edge(0, 1)
    before = store.snapshot()
    events_before = len(store.event_log.events)

    failing = [
        lambda: store.add_process("editor"),
        lambda: store.add_resource("disk"),
        lambda: store.add_request_edge(0, 0),
        lambda: store.add_request_edge(0, 5),
        lambda: store.add_allocation_edge(0, 1),
        lambda: store.add_allocation_edge(1, 4),
        lambda: store.remove_request_edge(1, 1),
        lambda: store.remove_allocation_edge(1, 0),
    ]
    for call in failing:
        try:
            call()
            assert False, "Operation should have failed"
        except GraphError:
            pass
        assert store.snapshot() == before

    assert len(store.event_log.events) == events_before


def test_snapshot_is_read_only_copy():
    """Snapshots do not change with the store and cannot be written."""
    store = _two_by_two()
    store.add_request_edge(1, 0)
    snap = store.snapshot()

    assert snap.process_names == ("editor", "backup")
    assert snap.resource_names == ("disk", "printer")
    assert snap.num_processes == 2

    try:
        snap.request_matrix[0, 0] = True
        assert False, "Snapshot matrix should be read-only"
    except ValueError:
        pass

    store.add_allocation_edge(0, 0)
    assert snap.allocation_edges() == []
    assert snap.holder_of(0) is None
    assert store.snapshot().holder_of(0) == 0


def test_request_on_held_resource_is_allowed():
    """A process may request a resource it holds (self-wait)."""
    store = _two_by_two()
    store.add_allocation_edge(1, 0)
    store.add_request_edge(0, 1)
    assert store.has_request(0, 1)
    assert store.holder_of(1) == 0


def test_entities_added_after_edges_keep_edges():
    """Growing the matrices preserves existing edges."""
    store = _two_by_two()
    store.add_request_edge(1, 1)
    store.add_allocation_edge(1, 0)
    store.add_process("tester")
    store.add_resource("tape")

    assert store.has_request(1, 1)
    assert store.holder_of(1) == 0
    assert store.holder_of(2) is None
    assert not store.has_request(2, 2)


def test_reset_clears_everything():
    """Reset empties the graph and restarts indices at 0."""
    store = _two_by_two()
    store.add_request_edge(0, 0)
    store.add_allocation_edge(1, 1)

    store.reset()

    assert store.num_processes == 0
    assert store.num_resources == 0
    snap = store.snapshot()
    assert snap.request_edges() == []
    assert snap.allocation_edges() == []
    assert store.request_matrix.shape == (0, 0)
    assert store.find_process("editor") is None

    assert store.add_process("editor") == 0
    assert store.add_resource("disk") == 0
    assert store.holder_of(0) is None
    assert store.event_log.get_events_by_type(GraphEventType.RESET)


def test_event_log_records_mutations():
    store = _two_by_two()
    store.add_request_edge(0, 1)
    store.add_allocation_edge(1, 1)
    store.remove_request_edge(0, 1)

    types = [e.event_type for e in store.event_log.events]
    assert types == [
        GraphEventType.PROCESS_ADDED,
        GraphEventType.PROCESS_ADDED,
        GraphEventType.RESOURCE_ADDED,
        GraphEventType.RESOURCE_ADDED,
        GraphEventType.REQUEST_ADDED,
        GraphEventType.ALLOCATION_ADDED,
        GraphEventType.REQUEST_REMOVED,
    ]
    assert [e.seq for e in store.event_log.events] == list(range(7))
    assert str(store.event_log.latest()) == "#6: P0 no longer requests R1"


def test_display():
    """Graph dump lists every node with its outgoing edges."""
    store = _two_by_two()
    store.add_request_edge(0, 0)
    store.add_request_edge(0, 1)
    store.add_allocation_edge(0, 1)

    output = store.display()
    print(output)
    assert "P0 (editor): -> R0 -> R1" in output
    assert "P1 (backup):" in output
    assert "R0 (disk): -> P1" in output
    assert "R1 (printer): (free)" in output


def test_lookup_ignores_surrounding_whitespace():
    store = GraphStore()
    store.add_process(" editor ")
    store.add_resource("disk\t")

    assert store.process_name(0) == "editor"
    assert store.find_process(" editor") == 0
    assert store.find_process("editor") == 0
    assert store.find_resource(" disk ") == 0
    assert store.find_process(None) is None
