"""
Clustering Engine - Orchestrates clustering operations.

Main entry point for clustering functionality.
Manages algorithm selection, parameter validation, execution, and statistics.
"""

import logging
from typing import Dict, Any, Optional, Union

import numpy as np

from projection_clustering.config.settings_loader import Settings, get_settings
from projection_clustering.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
    validate_params,
)
from projection_clustering.core.cluster_statistics import compute_cluster_stats
from projection_clustering.core.dbscan_algorithm import DBSCANAlgorithm
from projection_clustering.core.kmeans_algorithm import KMeansAlgorithm
from projection_clustering.core.hierarchical_algorithm import HierarchicalAlgorithm
from projection_clustering.schemas.data_models import ClusterStats, Dataset, as_dataset
from projection_clustering.utils.advanced_logging import ClusteringRunLogger
from projection_clustering.utils.error_handling import InvalidParameterError

logger = logging.getLogger(__name__)

DatasetLike = Union[Dataset, np.ndarray, Any]


class ClusteringEngine:
    """
    Main clustering engine that orchestrates different algorithms.

    Provides a unified interface for all clustering operations regardless
    of the underlying algorithm. An engine remembers the last algorithm it
    ran in ``last_algorithm``; the value is informational only and every
    result carries its own algorithm name.
    """

    # Registry of available algorithms
    ALGORITHMS = {
        "dbscan": DBSCANAlgorithm,
        "kmeans": KMeansAlgorithm,
        "hierarchical": HierarchicalAlgorithm,
    }

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize clustering engine.

        Args:
            settings: Settings to use (defaults to the loaded application settings)
        """
        self.settings = settings or get_settings()
        self.last_algorithm: Optional[str] = None
        logger.info("Initialized ClusteringEngine")

    def resolve_algorithm(self, algorithm: Optional[str]) -> str:
        """
        Map a requested algorithm name to a registered one.

        Names are case-insensitive. None selects the configured default and an
        unknown name selects the configured fallback.
        """
        if algorithm is None:
            return self.settings.clustering.default_algorithm

        name = str(algorithm).strip().lower()
        if name in self.ALGORITHMS:
            return name

        fallback = self.settings.clustering.fallback_algorithm
        logger.warning(
            f"Unknown algorithm '{algorithm}', falling back to '{fallback}'. "
            f"Supported: {list(self.ALGORITHMS.keys())}"
        )
        return fallback

    def cluster(
        self,
        dataset: DatasetLike,
        algorithm: Optional[str],
        params: Optional[Dict[str, Any]] = None,
        seed: Optional[int] = None,
    ) -> ClusteringResult:
        """
        Perform clustering using the specified algorithm.

        Args:
            dataset: Dataset, (N x 2) coordinate array or iterable of (x, y) pairs
            algorithm: Algorithm name (dbscan/kmeans/hierarchical); unknown names
                fall back to the configured fallback algorithm
            params: Algorithm-specific parameters ({epsilon, min_samples},
                {k} or {max_clusters}; camelCase names are accepted)
            seed: Optional seed for randomized initialization (K-Means)

        Returns:
            ClusteringResult with labels and metrics. ``fallback_applied`` is
            True when ``algorithm`` was not recognized.

        Raises:
            InvalidParameterError: If required parameters are missing or out of range
            EmptyDatasetError: If the algorithm cannot run on zero points
        """
        dataset = as_dataset(dataset)
        resolved = self.resolve_algorithm(algorithm)
        requested = algorithm if algorithm is not None else resolved

        fallback_applied = resolved != str(requested).strip().lower()

        clusterer = self._create_clusterer(resolved, params or {}, seed)

        with ClusteringRunLogger(
            resolved,
            n_points=len(dataset),
            fallback_applied=fallback_applied,
        ) as run:
            result = clusterer.cluster(dataset)
            run.record(result)

        result.requested_algorithm = str(requested)
        result.fallback_applied = fallback_applied
        self.last_algorithm = resolved

        return result

    def stats(self, dataset: DatasetLike, result: ClusteringResult) -> ClusterStats:
        """
        Derive cluster statistics for a result produced from ``dataset``.

        Raises:
            ShapeMismatchError: If the result was not produced from this dataset
        """
        return compute_cluster_stats(dataset, result)

    def _create_clusterer(
        self,
        algorithm: str,
        params: Dict[str, Any],
        seed: Optional[int],
    ) -> BaseClusteringAlgorithm:
        clustering_settings = self.settings.clustering
        config = ClusteringConfig(
            algorithm_name=algorithm,
            params=dict(params),
            seed=seed,
            max_iter=clustering_settings.algorithms.kmeans.max_iter,
            warn_threshold=clustering_settings.algorithms.hierarchical.warn_threshold,
            compute_quality_metrics=clustering_settings.compute_quality_metrics,
        )

        algorithm_class = self.ALGORITHMS[algorithm]
        return algorithm_class(config)

    def get_recommended_algorithm(self, n_points: int) -> str:
        """
        Recommend clustering algorithm based on dataset size.

        Args:
            n_points: Number of points to cluster

        Returns:
            Recommended algorithm name
        """
        if n_points <= 100:
            # Small dataset: deterministic merging is affordable
            return "hierarchical"
        elif n_points <= 5000:
            # Medium dataset: density-based with noise detection
            return "dbscan"
        else:
            # Large dataset: linear-time iterations
            return "kmeans"

    def default_params(self, algorithm: Optional[str]) -> Dict[str, Any]:
        """Return the configured default parameter bundle for an algorithm."""
        algorithm = self.resolve_algorithm(algorithm)
        algorithms = self.settings.clustering.algorithms
        if algorithm == "dbscan":
            return {
                "epsilon": algorithms.dbscan.epsilon,
                "min_samples": algorithms.dbscan.min_samples,
            }
        elif algorithm == "kmeans":
            return {"k": algorithms.kmeans.k}
        return {"max_clusters": algorithms.hierarchical.max_clusters}

    def validate_clustering_config(
        self,
        algorithm: str,
        params: Dict[str, Any],
    ) -> Dict[str, str]:
        """
        Validate clustering configuration without running anything.

        Args:
            algorithm: Algorithm name
            params: Algorithm parameters

        Returns:
            Dictionary of validation errors (empty if valid). Unknown algorithm
            names are validated against the fallback algorithm's parameters.
        """
        errors = {}

        try:
            validate_params(self.resolve_algorithm(algorithm), params)
        except InvalidParameterError as e:
            errors.update(e.details["errors"])

        return errors


def cluster(
    dataset: DatasetLike,
    algorithm: Optional[str],
    params: Optional[Dict[str, Any]] = None,
    seed: Optional[int] = None,
) -> ClusteringResult:
    """Cluster ``dataset`` with a fresh engine (see ClusteringEngine.cluster)."""
    return ClusteringEngine().cluster(dataset, algorithm, params, seed=seed)


def stats(dataset: DatasetLike, result: ClusteringResult) -> ClusterStats:
    """Derive cluster statistics (see ClusteringEngine.stats)."""
    return compute_cluster_stats(dataset, result)
