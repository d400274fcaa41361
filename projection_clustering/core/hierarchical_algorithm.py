"""
Agglomerative Hierarchical Clustering Algorithm Implementation.

Single-linkage agglomerative clustering is ideal for:
- Chaining trajectories of one entity across consecutive years
- Small datasets (tens to low hundreds of points)
- When a fixed number of groups is wanted without random initialization
"""

import logging
from typing import List

import numpy as np

from projection_clustering.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
)
from projection_clustering.core.distance import pairwise_distances

logger = logging.getLogger(__name__)

METHOD_TAG = "single_linkage"


class HierarchicalAlgorithm(BaseClusteringAlgorithm):
    """
    Greedy agglomerative clustering with single linkage.

    Best for: Elongated or chained groups, deterministic results
    Strengths: No randomness, no noise concept, simple to reason about
    Weaknesses: Slow (O(n³)), chaining effect merges loosely connected groups
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize Hierarchical algorithm.

        Args:
            config: Clustering configuration
        """
        super().__init__(config)

        self.max_clusters = self.params.max_clusters
        self.warn_threshold = config.warn_threshold

        logger.info(f"Initialized Hierarchical: max_clusters={self.max_clusters}")

    def _fit(self, points: np.ndarray) -> ClusteringResult:
        n = len(points)

        if n > self.warn_threshold:
            logger.warning(
                f"Hierarchical clustering on {n} points may be slow (O(n³)). "
                "Consider DBSCAN or K-Means."
            )

        distances = pairwise_distances(points)
        clusters: List[List[int]] = [[i] for i in range(n)]
        merge_distances: List[float] = []

        while len(clusters) > self.max_clusters:
            merge_i, merge_j, min_dist = self._closest_pair(clusters, distances)

            clusters[merge_i] = clusters[merge_i] + clusters[merge_j]
            del clusters[merge_j]
            merge_distances.append(min_dist)

        labels = np.full(n, -1, dtype=np.int64)
        for cluster_id, members in enumerate(clusters):
            labels[members] = cluster_id

        logger.debug(f"Hierarchical performed {len(merge_distances)} merges")

        return ClusteringResult(
            cluster_labels=labels,
            n_clusters=len(clusters),
            outlier_count=0,
            quality_metrics={
                "n_merges": len(merge_distances),
                "merge_distances": merge_distances,
            },
            algorithm=self.name,
            method=METHOD_TAG,
            params=self.params.model_dump(),
        )

    @staticmethod
    def _closest_pair(clusters: List[List[int]], distances: np.ndarray):
        """
        Find the pair of clusters with the smallest single-linkage distance.

        Pairs are scanned outer index first; only a strictly smaller distance
        replaces the current best, so the first pair encountered wins ties.
        """
        min_dist = np.inf
        merge_i, merge_j = -1, -1

        for i in range(len(clusters)):
            for j in range(i + 1, len(clusters)):
                dist = single_linkage_distance(clusters[i], clusters[j], distances)
                if dist < min_dist:
                    min_dist = dist
                    merge_i, merge_j = i, j

        return merge_i, merge_j, float(min_dist)


def single_linkage_distance(
    cluster_a: List[int],
    cluster_b: List[int],
    distances: np.ndarray,
) -> float:
    """Minimum pairwise distance between members of two clusters."""
    return float(distances[np.ix_(cluster_a, cluster_b)].min())
