"""
Euclidean distance over projected 2-D points.

All three clusterers measure distance through these helpers so that the
neighborhood, assignment and linkage computations agree on ties.
"""

import math
from typing import Sequence

import numpy as np


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Return sqrt((ax - bx)^2 + (ay - by)^2)."""
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2)


def pairwise_distances(points: np.ndarray) -> np.ndarray:
    """
    Full (n x n) Euclidean distance matrix.

    Args:
        points: Coordinates (N x 2)

    Returns:
        Symmetric matrix with a zero diagonal
    """
    return distances_to_centroids(points, points)


def distances_to_centroids(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Euclidean distance from every point to every centroid.

    Args:
        points: Coordinates (N x 2)
        centroids: Coordinates (K x 2)

    Returns:
        Distance matrix (N x K)
    """
    dx = points[:, np.newaxis, 0] - centroids[np.newaxis, :, 0]
    dy = points[:, np.newaxis, 1] - centroids[np.newaxis, :, 1]
    return np.sqrt(dx ** 2 + dy ** 2)
