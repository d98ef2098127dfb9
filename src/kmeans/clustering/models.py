"""
Data models for k-means clustering.

Defines points, clusters and the point -> cluster assignment table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


# Assignment sentinel for points not yet placed in any cluster
UNASSIGNED = -1


@dataclass(frozen=True, eq=False)
class Point:
    """A labeled coordinate vector. Name is assumed unique."""

    name: str
    coordinates: np.ndarray

    @classmethod
    def create(cls, name: str, values) -> Point:
        """Build a point, copying values into a float64 vector."""
        return cls(name=name, coordinates=np.array(values, dtype=np.float64))

    @property
    def dimension(self) -> int:
        return int(self.coordinates.shape[0])

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "coordinates": [float(v) for v in self.coordinates],
        }


@dataclass
class Cluster:
    """State of a single cluster."""

    cluster_id: int              # 0..k-1, fixed at creation
    centroid: np.ndarray         # Mean of members after the last pass
    members: dict[str, Point] = field(default_factory=dict)  # name -> point

    def add_point(self, point: Point) -> None:
        """Add a point to this cluster's membership."""
        self.members[point.name] = point

    def remove_point(self, point: Point) -> None:
        """Remove a point by name. No-op if it is not a member."""
        self.members.pop(point.name, None)

    @property
    def size(self) -> int:
        return len(self.members)

    def member_names(self) -> list[str]:
        return list(self.members)

    def member_points(self) -> list[Point]:
        return list(self.members.values())

    def copy(self) -> Cluster:
        """Independent copy of centroid and membership."""
        return Cluster(
            cluster_id=self.cluster_id,
            centroid=self.centroid.copy(),
            members=dict(self.members),
        )

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "cluster_id": self.cluster_id,
            "centroid": [float(v) for v in self.centroid],
            "size": self.size,
            "members": [p.to_dict() for p in self.members.values()],
        }


class AssignmentTable:
    """Tracks point name -> cluster id. The authority on membership."""

    def __init__(self):
        self.assignments: dict[str, int] = {}  # name -> cluster_id

    def get(self, name: str) -> int:
        return self.assignments.get(name, UNASSIGNED)

    def assign(self, name: str, cluster_id: int) -> None:
        """Assign a point to a cluster."""
        self.assignments[name] = cluster_id

    def members_of(self, cluster_id: int) -> list[str]:
        """Get all point names assigned to a cluster."""
        return [
            name for name, cid in self.assignments.items()
            if cid == cluster_id
        ]

    def assigned_count(self) -> int:
        return len(self.assignments)

    def clear(self) -> None:
        self.assignments.clear()

    def copy(self) -> AssignmentTable:
        table = AssignmentTable()
        table.assignments = dict(self.assignments)
        return table

    def to_dict(self) -> dict:
        return {"assignments": dict(self.assignments)}


def dimension_of(points: list[Point]) -> Optional[int]:
    """Shared dimensionality of points, or None if they disagree."""
    dims = {p.dimension for p in points}
    if len(dims) != 1:
        return None
    return dims.pop()
