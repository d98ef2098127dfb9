"""
Clustering algorithms for batch k-means.

Core functions for Lloyd's two-phase pass: nearest-centroid assignment,
then centroid recomputation over the finalized memberships.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict

import numpy as np

from .models import (
    Point,
    Cluster,
    AssignmentTable,
    UNASSIGNED,
)


@dataclass
class PassStats:
    """Counts for a single assign/update pass."""

    iteration: int
    assigned: int        # Points placed for the first time
    reassigned: int      # Points moved between clusters
    empty_clusters: int  # Clusters left without members (centroid frozen)

    @property
    def changed(self) -> bool:
        return (self.assigned + self.reassigned) > 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["changed"] = self.changed
        return data


def squared_euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Compute squared Euclidean distance between two vectors."""
    if a.shape != b.shape:
        raise ValueError(f"Dimension mismatch: {a.shape[0]} vs {b.shape[0]}")
    diff = a - b
    return float(np.dot(diff, diff))


def find_nearest_cluster(coordinates: np.ndarray, clusters: list[Cluster]) -> int:
    """
    Find the id of the cluster whose centroid is nearest.

    Clusters are scanned in id order and the best is replaced only on a
    strictly smaller distance, so ties go to the lowest cluster id. The
    first cluster is the starting best, so a cluster is always returned
    even when every distance overflows to inf.
    """
    if not clusters:
        raise ValueError("No clusters to search")

    best_id = clusters[0].cluster_id
    best_distance = squared_euclidean_distance(coordinates, clusters[0].centroid)

    for cluster in clusters[1:]:
        distance = squared_euclidean_distance(coordinates, cluster.centroid)
        if distance < best_distance:
            best_distance = distance
            best_id = cluster.cluster_id

    return best_id


def compute_centroid(points: list[Point]) -> np.ndarray:
    """Coordinate-wise mean over all dimensions of the given points."""
    if not points:
        raise ValueError("Cannot compute centroid of an empty cluster")
    return np.stack([p.coordinates for p in points]).mean(axis=0)


def move_point(
    point: Point,
    cluster_id: int,
    clusters: list[Cluster],
    assignments: AssignmentTable,
) -> int:
    """
    Move a point to a cluster, keeping table and membership in step.

    Returns the previous cluster id (UNASSIGNED if none).
    """
    old_id = assignments.get(point.name)
    if old_id != UNASSIGNED:
        clusters[old_id].remove_point(point)
    assignments.assign(point.name, cluster_id)
    clusters[cluster_id].add_point(point)
    return old_id


def assign_points(
    points: list[Point],
    clusters: list[Cluster],
    assignments: AssignmentTable,
) -> tuple[int, int]:
    """
    Assign phase: send every point, in input order, to its nearest cluster.

    Centroids are read but never modified here.

    Returns:
        (assigned, reassigned) counts for the pass
    """
    assigned = 0
    reassigned = 0

    for point in points:
        new_id = find_nearest_cluster(point.coordinates, clusters)
        old_id = assignments.get(point.name)
        if new_id == old_id:
            continue

        move_point(point, new_id, clusters, assignments)
        if old_id == UNASSIGNED:
            assigned += 1
        else:
            reassigned += 1

    return assigned, reassigned


def update_centroids(clusters: list[Cluster]) -> int:
    """
    Update phase: recompute each centroid as the mean of its members.

    Clusters with no members keep their previous centroid.

    Returns:
        Number of empty clusters
    """
    empty = 0
    for cluster in clusters:
        if cluster.size == 0:
            empty += 1
            continue
        cluster.centroid = compute_centroid(cluster.member_points())
    return empty


def total_inertia(clusters: list[Cluster]) -> float:
    """Sum of squared distances from each member to its centroid."""
    return sum(
        squared_euclidean_distance(p.coordinates, cluster.centroid)
        for cluster in clusters
        for p in cluster.members.values()
    )
