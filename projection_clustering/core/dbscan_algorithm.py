"""
DBSCAN Clustering Algorithm Implementation.

Density-Based Spatial Clustering of Applications with Noise is ideal for:
- Finding clusters without knowing how many exist
- Arbitrary-shaped groups of entities in the projection
- Flagging isolated entity/years as noise
"""

import logging
from collections import deque

import numpy as np

from projection_clustering.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
)
from projection_clustering.core.distance import pairwise_distances
from projection_clustering.schemas.data_models import NOISE_LABEL

logger = logging.getLogger(__name__)

# Internal marker for points not yet reached by the traversal
UNSET_LABEL = -2


class DBSCANAlgorithm(BaseClusteringAlgorithm):
    """
    DBSCAN clustering implementation.

    Best for: Dense groups of entities, outlier detection
    Strengths: No cluster count needed, arbitrary shapes, explicit noise
    Weaknesses: Single global epsilon, O(n²) neighborhood queries

    Border points keep the first cluster that reaches them. A point provisionally
    marked as noise is relabeled when a later core point reaches it, but a point
    holding a cluster id is never moved to another cluster.
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize DBSCAN algorithm.

        Args:
            config: Clustering configuration
        """
        super().__init__(config)

        self.epsilon = self.params.epsilon
        self.min_samples = self.params.min_samples

        logger.info(
            f"Initialized DBSCAN: epsilon={self.epsilon}, min_samples={self.min_samples}"
        )

    def _fit(self, points: np.ndarray) -> ClusteringResult:
        n = len(points)
        labels = np.full(n, UNSET_LABEL, dtype=np.int64)
        distances = pairwise_distances(points)

        def region_query(index: int) -> np.ndarray:
            return np.flatnonzero(distances[index] <= self.epsilon)

        cluster_id = 0
        for i in range(n):
            if labels[i] != UNSET_LABEL:
                continue

            neighbors = region_query(i)
            if len(neighbors) < self.min_samples:
                labels[i] = NOISE_LABEL
                continue

            labels[i] = cluster_id
            self._expand_cluster(labels, neighbors, cluster_id, region_query)
            cluster_id += 1

        outlier_count = int(np.sum(labels == NOISE_LABEL))

        logger.debug(f"DBSCAN opened {cluster_id} clusters over {n} points")

        return ClusteringResult(
            cluster_labels=labels,
            n_clusters=cluster_id,
            outlier_count=outlier_count,
            quality_metrics={},
            algorithm=self.name,
            params=self.params.model_dump(),
        )

    def _expand_cluster(self, labels, neighbors, cluster_id, region_query) -> None:
        """Grow ``cluster_id`` outward from a core point's neighborhood."""
        queued = np.zeros(len(labels), dtype=bool)
        queued[neighbors] = True
        frontier = deque(neighbors.tolist())

        while frontier:
            j = frontier.popleft()
            if labels[j] >= 0:
                # Already a member of this or an earlier cluster
                continue

            labels[j] = cluster_id

            j_neighbors = region_query(j)
            if len(j_neighbors) >= self.min_samples:
                fresh = j_neighbors[~queued[j_neighbors]]
                queued[fresh] = True
                frontier.extend(fresh.tolist())
