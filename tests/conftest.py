"""
Pytest configuration and shared fixtures for the projection clustering tests.

This module provides:
- Small hand-made point layouts with known clusterings
- Projected-coordinate export rows (entity, year, D1, D2)
- Settings and engine fixtures
- Settings singleton isolation
"""

import numpy as np
import pytest

from projection_clustering.config.settings_loader import ConfigManager, Settings
from projection_clustering.core.base_clustering import ClusteringConfig
from projection_clustering.core.clustering_engine import ClusteringEngine
from projection_clustering.schemas.data_models import Dataset

# =============================================================================
# Test Data Generators
# =============================================================================

@pytest.fixture
def two_groups_points():
    """Two tight groups of three points, far apart."""
    return np.array([
        [0.0, 0.0], [0.1, 0.0], [0.0, 0.1],
        [10.0, 10.0], [10.1, 10.0], [10.0, 10.1],
    ])


@pytest.fixture
def scattered_points():
    """Five points with all pairwise distances above 0.5."""
    return np.array([
        [0.0, 0.0], [2.0, 0.0], [4.0, 0.0], [0.0, 2.0], [4.0, 4.0],
    ])


@pytest.fixture
def near_pairs_points():
    """Two vertical pairs separated horizontally."""
    return np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 0.0], [10.0, 1.0]])


@pytest.fixture
def collinear_points():
    """Two close points and one far point on the x axis."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [100.0, 0.0]])


@pytest.fixture
def clustered_points():
    """
    Generate points with clear cluster structure.

    Creates 3 distinct blobs of 20 points:
    - Cluster 0: centered at (0, 0)
    - Cluster 1: centered at (5, 5)
    - Cluster 2: centered at (10, 0)
    """
    rng = np.random.default_rng(42)
    centers = [(0.0, 0.0), (5.0, 5.0), (10.0, 0.0)]
    blobs = [np.asarray(c) + rng.normal(scale=0.2, size=(20, 2)) for c in centers]
    labels = np.repeat(np.arange(3), 20)
    return np.vstack(blobs), labels


@pytest.fixture
def projected_rows():
    """Rows of a projected-coordinate export: one per country and year."""
    rows = []
    for year in range(2010, 2016):
        offset = (year - 2010) * 0.05
        rows.append({"country": "DEU", "year": year, "D1": 0.0 + offset, "D2": 0.0})
        rows.append({"country": "FRA", "year": year, "D1": 0.1 + offset, "D2": 0.05})
        rows.append({"country": "BRA", "year": year, "D1": 5.0 + offset, "D2": 5.0})
        rows.append({"country": "ARG", "year": year, "D1": 5.1 + offset, "D2": 5.05})
    return rows


@pytest.fixture
def projected_dataset(projected_rows):
    """Dataset built from the projected export rows."""
    return Dataset.from_rows(projected_rows)


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Default settings, independent of any settings file."""
    return Settings()


@pytest.fixture
def engine(settings):
    """Clustering engine using default settings."""
    return ClusteringEngine(settings)


@pytest.fixture
def dbscan_config():
    """Sample DBSCAN configuration."""
    return ClusteringConfig(
        algorithm_name="dbscan",
        params={"epsilon": 0.5, "min_samples": 2},
    )


@pytest.fixture(autouse=True)
def isolate_settings():
    """Restore the settings singleton after each test."""
    saved = ConfigManager._settings
    yield
    ConfigManager._settings = saved


class FixedDraw:
    """Stand-in random source returning preset centroid indices."""

    def __init__(self, indices):
        self.indices = np.asarray(indices)

    def integers(self, low, high, size=None):
        assert size == len(self.indices)
        assert all(low <= i < high for i in self.indices)
        return self.indices.copy()


@pytest.fixture
def fixed_draw():
    """Factory for preset K-Means initial draws."""
    return FixedDraw


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for component interactions"
    )
