"""
Scenario Loader for the RAG Deadlock Detector.

Loads and validates JSON scenario files describing a Resource Allocation Graph.
Edges reference processes and resources by name.
"""

import json
from typing import Dict, List, Any, Optional

from models.graph_store import GraphStore
from models.errors import GraphError


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


def load_scenario(
    file_path: str,
    logger=None,
    max_processes: Optional[int] = None,
    max_resources: Optional[int] = None
) -> GraphStore:
    """
    Load scenario from JSON file.

    Format:
        {
          "capacity": {"max_processes": 10, "max_resources": 10},   (optional)
          "processes": ["editor", "backup"],
          "resources": ["disk", "printer"],
          "requests": [{"process": "editor", "resource": "disk"}],  (optional)
          "allocations": [{"resource": "disk", "process": "backup"}] (optional)
        }

    Args:
        file_path: Path to scenario JSON file
        logger: Optional DetectorLogger passed to the graph store
        max_processes: Overrides the scenario's process capacity
        max_resources: Overrides the scenario's resource capacity

    Returns:
        GraphStore populated with the scenario's entities and edges

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}") from e
    except UnicodeDecodeError as e:
        raise ScenarioLoadError(f"Invalid scenario encoding (expected UTF-8): {e}") from e
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}") from e
    except OSError as e:
        raise ScenarioLoadError(f"Cannot read scenario file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")

    # Validate required fields
    if 'processes' not in data:
        raise ScenarioLoadError("Scenario missing 'processes' field")
    if 'resources' not in data:
        raise ScenarioLoadError("Scenario missing 'resources' field")

    capacity = _load_capacity(data.get('capacity', {}))
    if max_processes is not None:
        capacity['max_processes'] = max_processes
    if max_resources is not None:
        capacity['max_resources'] = max_resources

    store = GraphStore(
        max_processes=capacity.get('max_processes'),
        max_resources=capacity.get('max_resources'),
        logger=logger
    )

    try:
        for name in _load_names(data['processes'], 'processes'):
            store.add_process(name)
        for name in _load_names(data['resources'], 'resources'):
            store.add_resource(name)

        for edge in _load_edges(data.get('requests', []), 'requests'):
            process, resource = _resolve(store, edge, 'requests')
            store.add_request_edge(process, resource)

        # Applied in file order: a later allocation of the same resource wins
        for edge in _load_edges(data.get('allocations', []), 'allocations'):
            process, resource = _resolve(store, edge, 'allocations')
            store.add_allocation_edge(resource, process)
    except (GraphError, ValueError) as e:
        raise ScenarioLoadError(f"Invalid scenario graph: {e}") from e

    return store


def _load_capacity(capacity_data: Any) -> Dict[str, int]:
    """
    Validate optional capacity limits.

    Args:
        capacity_data: Capacity dictionary from scenario

    Returns:
        Dict with the limits that were given
    """
    if not isinstance(capacity_data, dict):
        raise ScenarioLoadError("'capacity' must be an object")

    capacity = {}
    for key in ('max_processes', 'max_resources'):
        if key not in capacity_data:
            continue
        value = capacity_data[key]
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ScenarioLoadError(f"'capacity.{key}' must be a non-negative integer")
        capacity[key] = value
    return capacity


def _load_names(names: Any, field: str) -> List[str]:
    """Validate a list of entity names."""
    if not isinstance(names, list):
        raise ScenarioLoadError(f"'{field}' must be a list of names")
    for name in names:
        if not isinstance(name, str):
            raise ScenarioLoadError(f"'{field}' entries must be strings, got {name!r}")
    return names


def _load_edges(edges: Any, field: str) -> List[Dict]:
    """Validate a list of {"process": ..., "resource": ...} entries."""
    if not isinstance(edges, list):
        raise ScenarioLoadError(f"'{field}' must be a list")
    for edge in edges:
        if not isinstance(edge, dict) or 'process' not in edge or 'resource' not in edge:
            raise ScenarioLoadError(
                f"'{field}' entries need 'process' and 'resource' fields, got {edge!r}"
            )
        if not isinstance(edge['process'], str) or not isinstance(edge['resource'], str):
            raise ScenarioLoadError(f"'{field}' entries must reference names, got {edge!r}")
    return edges


def _resolve(store: GraphStore, edge: Dict, field: str):
    """Map an edge's names to (process index, resource index)."""
    process = store.find_process(edge['process'])
    if process is None:
        raise ScenarioLoadError(f"{field}: unknown process '{edge['process']}'")
    resource = store.find_resource(edge['resource'])
    if resource is None:
        raise ScenarioLoadError(f"{field}: unknown resource '{edge['resource']}'")
    return process, resource
