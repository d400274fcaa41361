"""
K-Means Clustering Algorithm Implementation.

K-Means is ideal for:
- When the number of groups is known or chosen by the user
- Compact, roughly round groups in the projection
- Fast repeated runs while tuning k
"""

import logging

import numpy as np

from projection_clustering.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
)
from projection_clustering.core.distance import distances_to_centroids
from projection_clustering.utils.error_handling import (
    EmptyDatasetError,
    InvalidParameterError,
)

logger = logging.getLogger(__name__)


class KMeansAlgorithm(BaseClusteringAlgorithm):
    """
    K-Means clustering implementation (Lloyd iterations).

    Best for: Fixed group counts chosen by the user
    Strengths: Fast, simple, every point gets a cluster
    Weaknesses: Requires k, random initialization, assumes convex clusters
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize K-Means algorithm.

        Args:
            config: Clustering configuration (``seed`` makes runs reproducible)
        """
        super().__init__(config)

        self.k = self.params.k
        self.max_iter = config.max_iter
        self.seed = config.seed
        self.rng = np.random.default_rng(self.seed)

        logger.info(
            f"Initialized K-Means: k={self.k}, max_iter={self.max_iter}, seed={self.seed}"
        )

    def _fit(self, points: np.ndarray) -> ClusteringResult:
        n = len(points)
        if n == 0:
            raise EmptyDatasetError(
                "Cannot run K-Means on an empty dataset",
                details={"k": self.k},
            )
        if self.k > n:
            raise InvalidParameterError(
                f"k={self.k} exceeds dataset size {n}",
                details={"k": self.k, "n_points": n},
            )

        centroids, labels = self._initialize(points)

        iterations = 0
        changed = True
        while changed and iterations < self.max_iter:
            # Assignment: argmin picks the lowest centroid index on ties
            assignment = np.argmin(distances_to_centroids(points, centroids), axis=1)
            changed = bool(np.any(assignment != labels))
            labels = assignment

            # Update: empty clusters keep their previous centroid
            for j in range(self.k):
                members = points[labels == j]
                if len(members) > 0:
                    centroids[j] = members.mean(axis=0)

            iterations += 1

        converged = not changed
        if not converged:
            logger.warning(
                f"K-Means stopped at max_iter={self.max_iter} before assignments stabilized"
            )

        logger.debug(f"K-Means finished after {iterations} iterations")

        return ClusteringResult(
            cluster_labels=labels.astype(np.int64),
            n_clusters=self.k,
            outlier_count=0,
            quality_metrics={
                "iterations": iterations,
                "converged": converged,
                "inertia": self._inertia(points, labels, centroids),
            },
            algorithm=self.name,
            centroids=centroids,
            iterations=iterations,
            params=self.params.model_dump(),
        )

    def _initialize(self, points: np.ndarray):
        """
        Pick the starting centroids and the labeling they are compared against.

        Centroids are sampled uniformly with replacement, so duplicates may occur.
        With k equal to the dataset size every point seeds its own centroid.
        """
        n = len(points)
        if self.k == n:
            return points.copy(), np.arange(n)

        indices = self.rng.integers(0, n, size=self.k)
        return points[indices].copy(), np.full(n, -1)

    @staticmethod
    def _inertia(points: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
        """Sum of squared distances of points to their assigned centroid."""
        return float(np.sum((points - centroids[labels]) ** 2))
