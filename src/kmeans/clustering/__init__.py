"""
Batch k-means clustering (Lloyd's algorithm).

Deterministic seeding from the first k points, Euclidean nearest-centroid
assignment, and mean recomputation until assignments stop changing.
"""

from .models import (
    Point,
    Cluster,
    AssignmentTable,
    UNASSIGNED,
)
from .algorithm import (
    PassStats,
    squared_euclidean_distance,
    find_nearest_cluster,
    compute_centroid,
    assign_points,
    update_centroids,
)
from .engine import ClusteringEngine, ClusteringResult, PreconditionError

__all__ = [
    # Models
    "Point",
    "Cluster",
    "AssignmentTable",
    "UNASSIGNED",
    # Algorithm
    "PassStats",
    "squared_euclidean_distance",
    "find_nearest_cluster",
    "compute_centroid",
    "assign_points",
    "update_centroids",
    # Engine
    "ClusteringEngine",
    "ClusteringResult",
    "PreconditionError",
]
