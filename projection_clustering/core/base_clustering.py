"""
Base Clustering Algorithm Interface.

Defines the contract for all clustering algorithms of the engine.
Supports pluggable algorithms with consistent API.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, Optional, Union

import numpy as np
from pydantic import BaseModel, ValidationError

from projection_clustering.schemas.data_models import (
    NOISE_LABEL,
    PARAM_MODELS,
    Dataset,
    as_dataset,
)
from projection_clustering.utils.error_handling import InvalidParameterError

logger = logging.getLogger(__name__)


@dataclass
class ClusteringConfig:
    """Configuration for clustering algorithms."""

    algorithm_name: str
    params: Dict[str, Any]
    seed: Optional[int] = None
    max_iter: int = 100
    warn_threshold: int = 500
    compute_quality_metrics: bool = True


class ClusteringResult:
    """Results from clustering operation."""

    def __init__(
        self,
        cluster_labels: np.ndarray,
        n_clusters: int,
        outlier_count: int,
        quality_metrics: Dict[str, Any],
        algorithm: str,
        centroids: Optional[np.ndarray] = None,
        iterations: Optional[int] = None,
        method: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        requested_algorithm: Optional[str] = None,
        fallback_applied: bool = False,
    ):
        self.cluster_labels = cluster_labels
        self.n_clusters = n_clusters
        self.outlier_count = outlier_count
        self.quality_metrics = quality_metrics
        self.algorithm = algorithm
        self.centroids = centroids
        self.iterations = iterations
        self.method = method
        self.params = params or {}
        self.requested_algorithm = requested_algorithm or algorithm
        self.fallback_applied = fallback_applied

    @property
    def labels(self) -> np.ndarray:
        """Alias for cluster_labels."""
        return self.cluster_labels

    @property
    def noise_points(self) -> int:
        """Alias for outlier_count."""
        return self.outlier_count

    @property
    def cluster_centroids(self) -> Optional[Dict[int, np.ndarray]]:
        """Return centroids as dict mapping cluster_id -> centroid."""
        if self.centroids is None:
            return None
        return {i: self.centroids[i] for i in range(len(self.centroids))}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "algorithm": self.algorithm,
            "requested_algorithm": self.requested_algorithm,
            "fallback_applied": self.fallback_applied,
            "params": dict(self.params),
            "n_clusters": self.n_clusters,
            "outlier_count": self.outlier_count,
            "quality_metrics": self.quality_metrics,
            "total_items": len(self.cluster_labels),
        }
        if self.centroids is not None:
            data["centroids"] = self.centroids.tolist()
        if self.iterations is not None:
            data["iterations"] = self.iterations
        if self.method is not None:
            data["method"] = self.method
        return data

    def __repr__(self) -> str:
        return (
            f"ClusteringResult(algorithm={self.algorithm!r}, n_clusters={self.n_clusters}, "
            f"outlier_count={self.outlier_count}, total_items={len(self.cluster_labels)})"
        )


def validate_params(algorithm: str, params: Optional[Dict[str, Any]]) -> BaseModel:
    """
    Validate a parameter bundle against the algorithm's schema.

    Args:
        algorithm: Algorithm name (dbscan/kmeans/hierarchical)
        params: Raw parameter bundle (snake_case or camelCase keys)

    Returns:
        Validated parameter model

    Raises:
        InvalidParameterError: If a required field is missing or out of range
    """
    model = PARAM_MODELS[algorithm]
    try:
        return model.model_validate(params or {})
    except ValidationError as e:
        errors = {
            ".".join(str(part) for part in err["loc"]) or "params": err["msg"]
            for err in e.errors()
        }
        raise InvalidParameterError(
            f"Invalid {algorithm} parameters: {errors}",
            details={"algorithm": algorithm, "errors": errors},
        ) from e


class BaseClusteringAlgorithm(ABC):
    """
    Abstract base class for clustering algorithms.

    All clustering algorithms (DBSCAN, K-Means, Hierarchical) must inherit
    from this class and implement the _fit() method. Parameters are validated
    when the algorithm is constructed, before any data is seen.
    """

    def __init__(self, config: ClusteringConfig):
        """
        Initialize clustering algorithm.

        Args:
            config: Clustering configuration

        Raises:
            InvalidParameterError: If the parameters do not fit the algorithm
        """
        self.config = config
        self.name = config.algorithm_name
        self.params = validate_params(self.name, config.params)

    def cluster(self, data: Union[Dataset, np.ndarray, Any]) -> ClusteringResult:
        """
        Perform clustering on a dataset.

        Args:
            data: Dataset, (N x 2) coordinate array or iterable of (x, y) pairs

        Returns:
            ClusteringResult with labels and metrics
        """
        points = as_dataset(data).coordinates()
        logger.info(f"Starting {self.name} clustering on {len(points)} points")

        result = self._fit(points)

        if self.config.compute_quality_metrics:
            result.quality_metrics.update(
                self._calculate_quality_metrics(points, result.cluster_labels)
            )

        logger.info(
            f"{self.name} created {result.n_clusters} clusters "
            f"with {result.outlier_count} noise points"
        )
        return result

    @abstractmethod
    def _fit(self, points: np.ndarray) -> ClusteringResult:
        """
        Label the points.

        Args:
            points: Coordinates (N x 2); a private copy the algorithm may not share

        Returns:
            ClusteringResult with labels
        """
        pass

    def _calculate_quality_metrics(
        self,
        points: np.ndarray,
        labels: np.ndarray,
    ) -> Dict[str, float]:
        """
        Calculate clustering quality metrics.

        Args:
            points: Input coordinates
            labels: Cluster labels

        Returns:
            Dictionary of quality metrics
        """
        from sklearn.metrics import silhouette_score, davies_bouldin_score

        metrics = {}

        # Filter out noise (-1 labels) for metrics calculation
        member_mask = labels != NOISE_LABEL
        members = points[member_mask]
        member_labels = labels[member_mask]
        n_distinct = len(np.unique(member_labels))

        if 1 < n_distinct < len(members):
            try:
                # Silhouette score (higher is better, range: -1 to 1)
                metrics["silhouette_score"] = float(silhouette_score(members, member_labels))
                # Davies-Bouldin Index (lower is better)
                metrics["davies_bouldin_index"] = float(
                    davies_bouldin_score(members, member_labels)
                )
            except ValueError as e:
                logger.warning(f"Skipping silhouette/Davies-Bouldin metrics: {e}")

        # Mean distance of members to their cluster mean
        intra_distances = []
        for cluster_id in np.unique(member_labels):
            cluster_points = members[member_labels == cluster_id]
            center = cluster_points.mean(axis=0)
            intra_distances.append(
                float(np.mean(np.linalg.norm(cluster_points - center, axis=1)))
            )

        if intra_distances:
            metrics["avg_intra_cluster_distance"] = float(np.mean(intra_distances))

        return metrics
