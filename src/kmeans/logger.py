"""
Structured logging for k-means runs.

Single JSONL file with typed events for later analysis.

Event types:
- run_start: Config, input shape
- pass_end: Per-pass assignment counts
- run_end: Termination and cluster sizes
- error: Failed runs
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional

from .clustering.algorithm import PassStats


class RunLogger:
    def __init__(self, output_dir: Path):
        """
        Initialize logger for a run.

        Args:
            output_dir: Directory for the log file (created if missing)
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.output_dir / "run.jsonl"

        # Open file in append mode
        self.file_handle = open(self.log_file, 'a')

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        self.file_handle.write(json.dumps(event) + '\n')
        self.file_handle.flush()

    def log_run_start(self, config: dict[str, Any], num_points: int, dimension: int) -> None:
        """
        Log run initialization.

        Args:
            config: Run configuration parameters
            num_points: Number of input points
            dimension: Shared dimensionality of the points
        """
        self._write_event("run_start", {
            "config": config,
            "num_points": num_points,
            "dimension": dimension,
        })

    def log_pass(self, stats: PassStats) -> None:
        """Log the counts of one completed pass."""
        self._write_event("pass_end", stats.to_dict())

    def log_run_end(
        self,
        iterations: int,
        converged: bool,
        inertia: float,
        cluster_sizes: list[int],
    ) -> None:
        """
        Log run completion.

        Args:
            iterations: Passes run
            converged: Whether the last pass changed nothing
            inertia: Total within-cluster squared distance
            cluster_sizes: Member count per cluster, in id order
        """
        self._write_event("run_end", {
            "iterations": iterations,
            "converged": converged,
            "inertia": float(inertia),
            "cluster_sizes": cluster_sizes,
        })

    def log_error(
        self,
        message: str,
        iteration: Optional[int] = None,
        error_type: str = "error",
    ) -> None:
        """
        Log error event.

        Args:
            message: Error description
            iteration: Pass where the error occurred (if applicable)
            error_type: Error category (error, precondition, input)
        """
        data = {
            "message": message,
            "error_type": error_type,
        }
        if iteration is not None:
            data["iteration"] = iteration

        self._write_event("error", data)

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'file_handle') and self.file_handle:
            self.file_handle.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
