"""
Unit tests for dataset and parameter models.

Tests:
- Point validation and immutability
- Dataset construction from pairs, arrays and export rows
- Year/entity filtering
- Parameter schemas
"""

import math

import numpy as np
import pytest

from projection_clustering.schemas.data_models import (
    ClusterAlgorithm,
    DBSCANParams,
    Dataset,
    HierarchicalParams,
    KMeansParams,
    PARAM_MODELS,
    Point,
    Record,
    as_dataset,
)
from projection_clustering.utils.error_handling import InvalidDatasetError


@pytest.mark.unit
class TestPoint:
    """Point validation."""

    def test_coerces_to_float(self):
        point = Point("1.5", 2)
        assert point.as_tuple() == (1.5, 2.0)

    def test_immutable(self):
        point = Point(0.0, 0.0)
        with pytest.raises(Exception):
            point.x = 1.0

    @pytest.mark.parametrize("x, y", [(math.nan, 0.0), (0.0, math.inf), ("abc", 1.0), (None, 1.0)])
    def test_rejects_bad_coordinates(self, x, y):
        with pytest.raises(InvalidDatasetError):
            Point(x, y)


@pytest.mark.unit
class TestDataset:
    """Dataset construction and access."""

    def test_from_points(self):
        dataset = Dataset.from_points([(0, 0), Point(1, 1), Record(point=Point(2, 2))])

        assert len(dataset) == 3
        assert dataset.points == [Point(0, 0), Point(1, 1), Point(2, 2)]

    def test_from_array(self, two_groups_points):
        dataset = Dataset.from_points(two_groups_points)

        np.testing.assert_array_equal(dataset.coordinates(), two_groups_points)

    def test_from_array_wrong_shape(self):
        with pytest.raises(InvalidDatasetError):
            Dataset.from_points(np.zeros((3, 3)))

    def test_coordinates_are_fresh(self):
        dataset = Dataset.from_points([(0, 0), (1, 1)])
        coords = dataset.coordinates()
        coords[0, 0] = 99.0

        assert dataset.coordinates()[0, 0] == 0.0

    def test_empty_coordinates_shape(self):
        assert Dataset().coordinates().shape == (0, 2)

    def test_from_rows_keeps_passthrough_fields(self, projected_rows):
        dataset = Dataset.from_rows(projected_rows)

        assert len(dataset) == len(projected_rows)
        first = dataset[0]
        assert first.point == Point(0.0, 0.0)
        assert first.get("country") == "DEU"
        assert first.get("year") == 2010
        assert "D1" not in first.attributes

    def test_from_rows_custom_fields(self):
        dataset = Dataset.from_rows([{"px": 1, "py": 2, "id": "a"}], x_field="px", y_field="py")

        assert dataset[0].point == Point(1.0, 2.0)
        assert dataset[0].get("id") == "a"

    def test_from_rows_missing_field(self):
        with pytest.raises(InvalidDatasetError, match="missing coordinate field"):
            Dataset.from_rows([{"D1": 1.0}])

    def test_filter_by_year_range(self, projected_dataset):
        filtered = projected_dataset.filter(year_range=(2011, 2012))

        assert len(filtered) == 8
        assert {r.get("year") for r in filtered} == {2011, 2012}

    def test_filter_by_entities(self, projected_dataset):
        filtered = projected_dataset.filter(entities=["DEU", "BRA"])

        assert len(filtered) == 12
        assert {r.get("country") for r in filtered} == {"DEU", "BRA"}

    def test_filter_all_entities(self, projected_dataset):
        filtered = projected_dataset.filter(entities=["all"], year_range=(2015, 2015))

        assert len(filtered) == 4

    def test_filter_preserves_order(self, projected_dataset):
        filtered = projected_dataset.filter(entities=["FRA"])

        assert [r.get("year") for r in filtered] == list(range(2010, 2016))

    def test_filter_rejects_incomparable_year(self):
        """A year that cannot be ordered against the bounds is a dataset error."""
        dataset = Dataset.from_rows([{"D1": 0, "D2": 0, "year": "2010a", "country": "X"}])

        with pytest.raises(InvalidDatasetError) as exc_info:
            dataset.filter(year_range=(2000, 2020))

        assert exc_info.value.details["record"] == 0
        assert exc_info.value.details["field"] == "year"

    def test_filter_skips_records_without_year(self):
        dataset = Dataset.from_rows([
            {"D1": 0, "D2": 0, "year": 2012, "country": "X"},
            {"D1": 1, "D2": 1, "country": "Y"},
        ])

        assert [r.get("country") for r in dataset.filter(year_range=(2010, 2015))] == ["X"]

    def test_as_dataset_passthrough(self, projected_dataset):
        assert as_dataset(projected_dataset) is projected_dataset


@pytest.mark.unit
class TestParameterModels:
    """Parameter schemas."""

    def test_registry(self):
        assert set(PARAM_MODELS) == {a.value for a in ClusterAlgorithm}

    def test_dbscan_aliases(self):
        assert DBSCANParams(epsilon=0.2, minSamples=3).min_samples == 3
        assert DBSCANParams(epsilon=0.2, min_samples=3).min_samples == 3

    def test_dump_uses_field_names(self):
        params = HierarchicalParams.model_validate({"maxClusters": 3})
        assert params.model_dump() == {"max_clusters": 3}

    def test_extra_fields_ignored(self):
        assert KMeansParams.model_validate({"k": 2, "epsilon": 0.1}).k == 2

    @pytest.mark.parametrize(
        "model, payload",
        [
            (DBSCANParams, {"epsilon": 0.5, "minSamples": True}),
            (KMeansParams, {"k": True}),
            (HierarchicalParams, {"maxClusters": True}),
            (KMeansParams, {"k": "2"}),
        ],
    )
    def test_integer_fields_reject_booleans_and_strings(self, model, payload):
        with pytest.raises(ValueError):
            model.model_validate(payload)

    @pytest.mark.parametrize("payload", [{"k": 0}, {"k": 1.5}, {}])
    def test_kmeans_rejects(self, payload):
        with pytest.raises(ValueError):
            KMeansParams.model_validate(payload)
