"""
K-means run driver.

Core loop: read points → cluster → log → result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .clustering.models import Point
from .clustering.engine import ClusteringEngine, ClusteringResult, PreconditionError
from .config import KMeansConfig
from .logger import RunLogger
from .reader import InputFormatError, load_points


class KMeansRunner:
    """
    Runs one clustering job per call and records it in the run log.

    Errors are logged as events and re-raised to the caller.
    """

    def __init__(self, config: KMeansConfig, logger: Optional[RunLogger] = None):
        """
        Args:
            config: Run parameters
            logger: JSONL run logger (default: one in config.log_dir, if set)
        """
        self.config = config
        self._owns_logger = logger is None and config.log_dir is not None
        if self._owns_logger:
            logger = RunLogger(Path(config.log_dir))
        self.logger = logger

    def run(self, points: list[Point]) -> ClusteringResult:
        """Cluster points with the configured k and iteration cap."""
        try:
            engine = ClusteringEngine(self.config.k, points, verbose=self.config.verbose)
        except PreconditionError as e:
            self._log_error(str(e), "precondition")
            raise

        if self.logger:
            self.logger.log_run_start(
                config=self.config.to_dict(),
                num_points=len(engine.points),
                dimension=engine.dimension,
            )

        try:
            result = engine.run(
                self.config.max_iterations,
                on_pass=self.logger.log_pass if self.logger else None,
            )
        except PreconditionError as e:
            self._log_error(str(e), "precondition")
            raise

        if self.logger:
            self.logger.log_run_end(
                iterations=result.iterations,
                converged=result.converged,
                inertia=result.inertia(),
                cluster_sizes=result.cluster_sizes(),
            )

        return result

    def run_file(self, input_path: Path) -> ClusteringResult:
        """Load a point file and cluster it."""
        try:
            points = load_points(input_path)
        except InputFormatError as e:
            self._log_error(str(e), "input")
            raise

        if self.config.verbose:
            print(f"Loaded {len(points)} points from {input_path}")

        return self.run(points)

    def _log_error(self, message: str, error_type: str) -> None:
        if self.logger:
            self.logger.log_error(message, error_type=error_type)

    def close(self) -> None:
        """Close the run logger if this runner opened it."""
        if self._owns_logger and self.logger:
            self.logger.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
