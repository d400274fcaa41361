"""
Unit tests for cluster statistics aggregation.
"""

import numpy as np
import pytest

from projection_clustering.core.base_clustering import ClusteringResult
from projection_clustering.core.cluster_statistics import compute_cluster_stats
from projection_clustering.schemas.data_models import Dataset
from projection_clustering.utils.error_handling import ShapeMismatchError


def make_result(labels, n_clusters, algorithm="dbscan"):
    labels = np.asarray(labels)
    return ClusteringResult(
        cluster_labels=labels,
        n_clusters=n_clusters,
        outlier_count=int(np.sum(labels == -1)),
        quality_metrics={},
        algorithm=algorithm,
    )


@pytest.mark.unit
class TestClusterStatistics:
    """Test suite for compute_cluster_stats."""

    def test_counts_clusters_and_noise(self):
        """Sizes skip noise, noise is counted separately."""
        dataset = Dataset.from_points([(0, 0), (1, 1), (2, 2), (3, 3), (4, 4)])
        result = make_result([0, -1, 1, 0, -1], n_clusters=2)

        cluster_stats = compute_cluster_stats(dataset, result)

        assert cluster_stats.algorithm == "dbscan"
        assert cluster_stats.n_clusters == 2
        assert cluster_stats.total_points == 5
        assert cluster_stats.cluster_sizes == {0: 2, 1: 1}
        assert cluster_stats.noise_points == 2

    def test_sizes_sum_with_noise_to_total(self, clustered_points):
        """sum(cluster sizes) + noise == total points."""
        points, _ = clustered_points
        labels = np.where(np.arange(len(points)) % 7 == 0, -1, np.arange(len(points)) % 3)
        cluster_stats = compute_cluster_stats(points, make_result(labels, n_clusters=3))

        assert sum(cluster_stats.cluster_sizes.values()) + cluster_stats.noise_points == len(points)

    def test_sizes_sorted_by_cluster_id(self):
        """Cluster ids come out in ascending order."""
        dataset = Dataset.from_points([(0, 0)] * 4)
        cluster_stats = compute_cluster_stats(dataset, make_result([2, 0, 1, 2], n_clusters=3))

        assert list(cluster_stats.cluster_sizes.keys()) == [0, 1, 2]

    def test_empty(self):
        """Empty dataset and labeling give zero counts."""
        cluster_stats = compute_cluster_stats(Dataset(), make_result([], n_clusters=0))

        assert cluster_stats.total_points == 0
        assert cluster_stats.cluster_sizes == {}
        assert cluster_stats.noise_points == 0

    def test_shape_mismatch(self):
        """Label count must equal record count."""
        dataset = Dataset.from_points([(0, 0), (1, 1)])

        with pytest.raises(ShapeMismatchError) as exc_info:
            compute_cluster_stats(dataset, make_result([0, 0, 1], n_clusters=2))

        assert exc_info.value.details == {"labels": 3, "records": 2}

    def test_stats_are_read_only(self):
        """ClusterStats cannot be modified after creation."""
        dataset = Dataset.from_points([(0, 0)])
        cluster_stats = compute_cluster_stats(dataset, make_result([0], n_clusters=1, algorithm="kmeans"))

        with pytest.raises(Exception):
            cluster_stats.noise_points = 3
