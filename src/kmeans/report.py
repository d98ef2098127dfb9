"""
Render clustering results as a text report or a JSON-ready dict.
"""

from __future__ import annotations

import numpy as np

from .clustering.engine import ClusteringResult


def _to_native(obj):
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, dict):
        return {k: _to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_to_native(v) for v in obj]
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


def format_vector(values) -> str:
    """Format coordinates as '(x1, x2, ...)' with 6 significant digits."""
    return "(" + ", ".join(f"{float(v):g}" for v in values) + ")"


def format_report(result: ClusteringResult) -> str:
    """
    Human-readable report, one block per cluster.

    Example block:

        Cluster id: 0
        Centroid coordinates: (0.5, 0)
        Points:
        A (0, 0)
        B (1, 0)
    """
    lines = []
    for cluster in result.clusters:
        lines.append(f"Cluster id: {cluster.cluster_id}")
        lines.append(f"Centroid coordinates: {format_vector(cluster.centroid)}")
        lines.append("Points:")
        for point in cluster.member_points():
            lines.append(f"{point.name} {format_vector(point.coordinates)}")
        lines.append("")
    return "\n".join(lines) + "\n"


def format_summary(result: ClusteringResult) -> str:
    """One-line run summary."""
    state = "converged" if result.converged else "not converged"
    sizes = ", ".join(str(s) for s in result.cluster_sizes())
    return (f"{result.iterations} passes, {state}, "
            f"inertia {result.inertia():g}, sizes [{sizes}]")


def result_to_dict(result: ClusteringResult) -> dict:
    """Convert a result to a JSON-serializable dict."""
    return _to_native({
        "k": result.k,
        "iterations": result.iterations,
        "converged": result.converged,
        "inertia": result.inertia(),
        "labels": result.labels(),
        "clusters": [c.to_dict() for c in result.clusters],
        "history": [s.to_dict() for s in result.history],
    })
