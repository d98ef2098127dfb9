"""
Test ClusteringEngine: seeding, passes, termination and run properties
"""

import numpy as np
import pytest

from kmeans.clustering.models import Point, UNASSIGNED
from kmeans.clustering.engine import ClusteringEngine, PreconditionError


def abcd_points():
    return [
        Point.create("A", [0, 0]),
        Point.create("B", [1, 0]),
        Point.create("C", [10, 10]),
        Point.create("D", [11, 10]),
    ]


def random_points(n=60, dim=3, seed=0):
    rng = np.random.default_rng(seed)
    centers = rng.uniform(-20, 20, size=(4, dim))
    data = centers[rng.integers(0, 4, size=n)] + rng.normal(0, 2.0, size=(n, dim))
    return [Point.create(f"p{i}", row) for i, row in enumerate(data)]


def test_init_seeds_from_first_k_points():
    """Clusters 0..k-1 start at the first k points, in input order."""
    points = abcd_points()
    engine = ClusteringEngine(3, points)
    engine.init_clusters()

    assert [c.cluster_id for c in engine.clusters] == [0, 1, 2]
    for cluster, point in zip(engine.clusters, points):
        assert np.array_equal(cluster.centroid, point.coordinates)
        assert cluster.size == 0

    # Centroids are copies, not views of the point data
    assert engine.clusters[0].centroid is not points[0].coordinates
    assert all(engine.cluster_of(p) == UNASSIGNED for p in points)


def test_cluster_ids_scoped_per_engine():
    """A second engine numbers its clusters from 0 again."""
    first = ClusteringEngine(2, abcd_points())
    first.run(10)
    second = ClusteringEngine(2, abcd_points())
    second.run(10)
    assert [c.cluster_id for c in second.clusters] == [0, 1]


def test_example_two_groups():
    """A,B near the origin and C,D near (10,10) separate with k=2."""
    print("Testing four-point example...")

    engine = ClusteringEngine(2, abcd_points())
    result = engine.run(max_iterations=10)

    assert result.converged
    c0, c1 = result.clusters
    assert c0.member_names() == ["A", "B"]
    assert c1.member_names() == ["C", "D"]
    assert c0.centroid.tolist() == [0.5, 0.0]
    assert c1.centroid.tolist() == [10.5, 10.0]
    print(f"  ✓ Converged after {result.iterations} passes")

    # Final partition is in place after the second pass; the third confirms it
    assert result.iterations == 3
    assert result.history[0].assigned == 4
    assert result.history[1].reassigned == 1
    assert not result.history[2].changed

    assert result.labels() == {"A": 0, "B": 0, "C": 1, "D": 1}
    assert result.inertia() == pytest.approx(1.0)


def test_determinism():
    """Same input, k and cap give identical labels and centroids."""
    points = random_points()
    r1 = ClusteringEngine(4, points).run(100)
    r2 = ClusteringEngine(4, random_points()).run(100)

    assert r1.labels() == r2.labels()
    assert r1.iterations == r2.iterations
    for a, b in zip(r1.clusters, r2.clusters):
        assert np.array_equal(a.centroid, b.centroid)


def test_partition_and_centroids_after_every_pass():
    """Each pass leaves a consistent partition and exact member means."""
    print("Testing per-pass invariants...")

    points = random_points(n=80, dim=4, seed=3)
    engine = ClusteringEngine(5, points)
    engine.init_clusters()

    for _ in range(50):
        stats = engine.step()
        engine.verify_partition()

        members = [name for c in engine.clusters for name in c.member_names()]
        assert len(members) == len(set(members)), "Point counted in two clusters"
        assert set(members) == {p.name for p in points}

        for cluster in engine.clusters:
            for name in cluster.member_names():
                assert engine.assignments.get(name) == cluster.cluster_id
            if cluster.size:
                expected = np.mean([p.coordinates for p in cluster.member_points()], axis=0)
                assert np.allclose(cluster.centroid, expected)

        if not stats.changed:
            break

    print(f"  ✓ Invariants held for {engine.iterations} passes")


def test_fixed_point_is_idempotent():
    """One more pass after convergence changes nothing."""
    engine = ClusteringEngine(4, random_points(seed=7))
    result = engine.run(200)
    assert result.converged

    before = [c.centroid.copy() for c in engine.clusters]
    labels = result.labels()

    stats = engine.step()
    assert not stats.changed
    assert engine.result().labels() == labels
    for old, cluster in zip(before, engine.clusters):
        assert np.array_equal(old, cluster.centroid)


def test_k_equals_point_count():
    """Every point ends up alone in its own cluster with no moves."""
    points = [
        Point.create("A", [0, 0]),
        Point.create("B", [5, 0]),
        Point.create("C", [0, 5]),
    ]
    result = ClusteringEngine(3, points).run(10)

    assert result.converged
    assert result.iterations == 2
    assert sum(s.reassigned for s in result.history) == 0
    for cluster, point in zip(result.clusters, points):
        assert cluster.member_names() == [point.name]
        assert np.array_equal(cluster.centroid, point.coordinates)


def test_iteration_cap():
    """Hitting max_iterations before stability reports not converged."""
    engine = ClusteringEngine(2, abcd_points())
    result = engine.run(max_iterations=1)

    assert result.iterations == 1
    assert not result.converged
    assert result.clusters[1].member_names() == ["B", "C", "D"]


def test_zero_iterations():
    """max_iterations=0 leaves the seeded clusters untouched."""
    points = abcd_points()
    result = ClusteringEngine(2, points).run(max_iterations=0)

    assert result.iterations == 0
    assert not result.converged
    assert result.cluster_sizes() == [0, 0]
    assert result.clusters[1].centroid.tolist() == [1.0, 0.0]
    assert all(v == UNASSIGNED for v in result.labels().values())


def test_empty_cluster_keeps_centroid():
    """A cluster that wins no points keeps its previous centroid."""
    print("Testing empty cluster handling...")

    # Duplicate seeds: every tie goes to cluster 0, so cluster 1 starts empty
    points = [
        Point.create("A", [0]),
        Point.create("B", [0]),
        Point.create("C", [10]),
    ]
    engine = ClusteringEngine(2, points)

    stats = engine.step()
    assert stats.empty_clusters == 1
    assert engine.clusters[1].size == 0
    assert engine.clusters[1].centroid.tolist() == [0.0]
    print("  ✓ Empty cluster centroid frozen")

    result = engine.run(10)
    assert result.converged
    assert result.labels() == {"A": 1, "B": 1, "C": 0}
    assert result.clusters[0].centroid.tolist() == [10.0]
    assert result.clusters[1].centroid.tolist() == [0.0]


def test_higher_dimensions():
    points = [
        Point.create("A", [0, 0, 0]),
        Point.create("B", [20, 20, 20]),
        Point.create("C", [0, 0, 2]),
        Point.create("D", [20, 20, 22]),
    ]
    result = ClusteringEngine(2, points).run(10)
    assert result.converged
    assert result.clusters[0].centroid.tolist() == [0.0, 0.0, 1.0]
    assert result.clusters[1].centroid.tolist() == [20.0, 20.0, 21.0]


def test_verbose_prints_progress(capsys):
    ClusteringEngine(2, abcd_points(), verbose=True).run(10)
    out = capsys.readouterr().out
    assert "Pass 1: assigned 4" in out
    assert "Converged after 3 passes" in out


def test_on_pass_callback():
    seen = []
    ClusteringEngine(2, abcd_points()).run(10, on_pass=seen.append)
    assert [s.iteration for s in seen] == [1, 2, 3]


@pytest.mark.parametrize("k", [0, -1, 5])
def test_bad_k_rejected(k):
    with pytest.raises(PreconditionError):
        ClusteringEngine(k, abcd_points())


def test_non_integer_k_rejected():
    with pytest.raises(PreconditionError):
        ClusteringEngine(2.0, abcd_points())
    with pytest.raises(PreconditionError):
        ClusteringEngine(True, abcd_points())


def test_empty_points_rejected():
    with pytest.raises(PreconditionError):
        ClusteringEngine(1, [])


def test_inconsistent_dimension_rejected():
    points = abcd_points() + [Point.create("E", [1, 2, 3])]
    with pytest.raises(PreconditionError, match="inconsistent"):
        ClusteringEngine(2, points)


def test_non_finite_rejected():
    points = abcd_points() + [Point.create("E", [float("nan"), 0])]
    with pytest.raises(PreconditionError, match="non-finite"):
        ClusteringEngine(2, points)


@pytest.mark.parametrize("max_iterations", [-1, 1.5, None])
def test_bad_max_iterations_rejected(max_iterations):
    engine = ClusteringEngine(2, abcd_points())
    with pytest.raises(PreconditionError):
        engine.run(max_iterations)


def test_precondition_error_is_value_error():
    assert issubclass(PreconditionError, ValueError)


def test_huge_coordinates_still_assigned():
    """Distances that overflow to inf still land the point in a cluster."""
    print("Testing overflowing distances...")

    points = [
        Point.create("A", [0]),
        Point.create("B", [-1e200]),
        Point.create("C", [1e200]),
    ]
    engine = ClusteringEngine(2, points)
    engine.step()

    # C is inf from both centroids; the tie goes to cluster 0
    assert engine.result().labels() == {"A": 0, "B": 1, "C": 0}
    assert engine.clusters[0].member_names() == ["A", "C"]
    engine.verify_partition()
    print("  ✓ No point left unassigned")


def test_verify_partition_rejects_unassigned_point():
    points = abcd_points()
    engine = ClusteringEngine(2, points)
    engine.step()

    # Drop A from both the table and its cluster
    engine.assignments.assignments.pop("A")
    engine.clusters[0].remove_point(points[0])

    with pytest.raises(RuntimeError, match="no cluster"):
        engine.verify_partition()


def test_result_unchanged_by_later_passes():
    """A returned result is a snapshot; further runs do not alter it."""
    engine = ClusteringEngine(2, abcd_points())
    first = engine.run(1)

    assert first.labels() == {"A": 0, "B": 1, "C": 1, "D": 1}
    centroid = first.clusters[1].centroid.copy()

    second = engine.run(10)

    assert first.labels() == {"A": 0, "B": 1, "C": 1, "D": 1}
    assert first.clusters[1].member_names() == ["B", "C", "D"]
    assert np.array_equal(first.clusters[1].centroid, centroid)
    assert first.iterations == 1
    assert not first.converged

    # The second call reports only its own passes
    assert second.iterations == 2
    assert second.converged
    assert second.labels() == {"A": 0, "B": 0, "C": 1, "D": 1}
    assert [s.iteration for s in second.history] == [2, 3]
