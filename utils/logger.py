"""
Logger utility for the RAG Deadlock Detector.

Provides console and file logging with verbosity levels.
"""

from typing import Optional
from datetime import datetime


class DetectorLogger:
    """
    Logger for graph changes and detection results.
    
    Format: "[WARNING] R1 (disk) revoked from P0 (editor), now held by P2 (backup)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.
        
        Args:
            verbose: Enable verbose (debug) output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Deadlock Detection Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.
        
        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        # Console output
        print(formatted)

        # File output
        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_revocation(self, resource: str, old_holder: str, new_holder: str) -> None:
        """
        Log an allocation override.
        
        Args:
            resource: Label of the reassigned resource
            old_holder: Label of the process that lost the resource
            new_holder: Label of the process that now holds it
        """
        message = f"{resource} revoked from {old_holder}, now held by {new_holder}"
        self.log(message, "warning")

    def log_deadlock(self, trace: str) -> None:
        """
        Log deadlock detection.
        
        Args:
            trace: Rendered cycle, e.g. "P0 -> R0 -> P1 -> R1 -> P0"
        """
        self.log(f"DEADLOCK DETECTED - Cycle: {trace}")

    def log_no_deadlock(self) -> None:
        """Log a detection pass that found no cycle."""
        self.log("No deadlock detected")

    def log_graph(self, graph_str: str) -> None:
        """
        Log a graph dump (verbose only).
        
        Args:
            graph_str: Formatted graph
        """
        if self.verbose:
            self.log(f"Graph State:\n{graph_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
