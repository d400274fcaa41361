"""
Cluster statistics derived from a labeling.

Pure aggregation: nothing algorithm-specific is recomputed here.
"""

import logging
from collections import Counter
from typing import Union

import numpy as np

from projection_clustering.core.base_clustering import ClusteringResult
from projection_clustering.schemas.data_models import (
    NOISE_LABEL,
    ClusterStats,
    Dataset,
    as_dataset,
)
from projection_clustering.utils.error_handling import ShapeMismatchError

logger = logging.getLogger(__name__)


def compute_cluster_stats(
    dataset: Union[Dataset, np.ndarray],
    result: ClusteringResult,
) -> ClusterStats:
    """
    Count cluster members and noise points of a clustering result.

    Args:
        dataset: The dataset the result was produced from
        result: Clustering result over ``dataset``

    Returns:
        ClusterStats with sizes keyed by cluster id in ascending order

    Raises:
        ShapeMismatchError: If the labeling and dataset lengths differ
    """
    total_points = len(as_dataset(dataset))
    labels = result.cluster_labels

    if len(labels) != total_points:
        raise ShapeMismatchError(
            f"Labeling has {len(labels)} entries but dataset has {total_points} records",
            details={"labels": len(labels), "records": total_points},
        )

    counts = Counter(int(label) for label in labels)
    noise_points = counts.pop(NOISE_LABEL, 0)

    stats = ClusterStats(
        algorithm=result.algorithm,
        n_clusters=result.n_clusters,
        total_points=total_points,
        cluster_sizes=dict(sorted(counts.items())),
        noise_points=noise_points,
    )

    logger.debug(
        f"Cluster stats: {stats.n_clusters} clusters, {stats.noise_points} noise, "
        f"{stats.total_points} points"
    )
    return stats
