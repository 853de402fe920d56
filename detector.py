#!/usr/bin/env python3
"""
RAG Deadlock Detector
Main entry point for the detection tool.

Loads a Resource Allocation Graph scenario, builds its Wait-For Graph and
reports the first deadlock cycle, if any.
"""

import argparse
import sys
from typing import Optional

from utils.scenario_loader import load_scenario, ScenarioLoadError
from utils.logger import DetectorLogger
from algorithms.detection import detect_deadlock, DetectionResult

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
# 2 is left to argparse usage errors
EXIT_DEADLOCK = 3


def run_detection(
    scenario_path: str,
    verbose: bool = False,
    show_graph: bool = False,
    log_file: Optional[str] = None,
    max_processes: Optional[int] = None,
    max_resources: Optional[int] = None
) -> Optional[DetectionResult]:
    """
    Run deadlock detection on a scenario file.

    Args:
        scenario_path: Path to scenario JSON file
        verbose: Enable verbose logging
        show_graph: Print the Resource Allocation Graph before detection
        log_file: Optional file receiving a copy of the output
        max_processes: Process capacity override
        max_resources: Resource capacity override

    Returns:
        DetectionResult, or None if the scenario could not be loaded
    """
    logger = DetectorLogger(verbose=verbose, log_file=log_file)
    try:
        return _detect(logger, scenario_path, show_graph, max_processes, max_resources)
    finally:
        logger.close()


def _detect(
    logger: DetectorLogger,
    scenario_path: str,
    show_graph: bool,
    max_processes: Optional[int],
    max_resources: Optional[int]
) -> Optional[DetectionResult]:
    """Load the scenario and report detection results through the logger."""
    try:
        store = load_scenario(
            scenario_path,
            logger=logger,
            max_processes=max_processes,
            max_resources=max_resources
        )
    except ScenarioLoadError as e:
        logger.log(f"Failed to load scenario: {e}", "error")
        return None

    logger.log(f"\n{'='*60}")
    logger.log("DEADLOCK DETECTION")
    logger.log(f"Scenario: {scenario_path}")
    logger.log(f"Processes: {store.num_processes}, Resources: {store.num_resources}")
    logger.log(f"{'='*60}")

    if show_graph:
        logger.log(store.display())
    else:
        logger.log_graph(store.display())

    result = detect_deadlock(store, logger=logger)

    if result.deadlock_exists:
        logger.log("\nProcesses in deadlock:")
        for link in result.links:
            resource = "unknown resource" if link.resource is None else f"R{link.resource}"
            logger.log(f"  P{link.waiting} waits for {resource} held by P{link.holder}")

    if logger.verbose:
        logger.log("\nEvent Log:", "debug")
        logger.log(store.event_log.display(), "debug")

    return result


def main(argv=None):
    """Main entry point for the detector."""
    parser = argparse.ArgumentParser(
        description='Resource Allocation Graph Deadlock Detector'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--show-graph',
        action='store_true',
        help='Print the Resource Allocation Graph before detection'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write output to this file'
    )
    parser.add_argument(
        '--max-processes',
        type=int,
        default=None,
        help='Process capacity (overrides scenario capacity)'
    )
    parser.add_argument(
        '--max-resources',
        type=int,
        default=None,
        help='Resource capacity (overrides scenario capacity)'
    )

    args = parser.parse_args(argv)

    # Validate arguments
    if args.max_processes is not None and args.max_processes < 0:
        parser.error('--max-processes must be non-negative')
    if args.max_resources is not None and args.max_resources < 0:
        parser.error('--max-resources must be non-negative')

    result = run_detection(
        args.scenario,
        verbose=args.verbose,
        show_graph=args.show_graph,
        log_file=args.log_file,
        max_processes=args.max_processes,
        max_resources=args.max_resources
    )

    if result is None:
        return EXIT_LOAD_ERROR
    return EXIT_DEADLOCK if result.deadlock_exists else EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
