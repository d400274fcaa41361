"""
Core clustering module.

Exports:
- ClusteringEngine: Main orchestration class
- cluster / stats: One-off facade functions
- BaseClusteringAlgorithm: Base class for algorithms
- ClusteringResult: Result container
- ClusteringConfig: Configuration container
- Individual algorithm implementations
"""

from projection_clustering.core.base_clustering import (
    BaseClusteringAlgorithm,
    ClusteringResult,
    ClusteringConfig,
)
from projection_clustering.core.cluster_statistics import compute_cluster_stats
from projection_clustering.core.clustering_engine import ClusteringEngine, cluster, stats
from projection_clustering.core.dbscan_algorithm import DBSCANAlgorithm
from projection_clustering.core.distance import euclidean_distance
from projection_clustering.core.kmeans_algorithm import KMeansAlgorithm
from projection_clustering.core.hierarchical_algorithm import HierarchicalAlgorithm

__all__ = [
    "ClusteringEngine",
    "cluster",
    "stats",
    "compute_cluster_stats",
    "BaseClusteringAlgorithm",
    "ClusteringResult",
    "ClusteringConfig",
    "DBSCANAlgorithm",
    "KMeansAlgorithm",
    "HierarchicalAlgorithm",
    "euclidean_distance",
]
