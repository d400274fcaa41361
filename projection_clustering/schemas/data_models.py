"""
data_models.py

Data models for the projection clustering engine.
Defines the dataset snapshot handed to the clusterers, the per-algorithm
parameter schemas, and the statistics returned to the rendering layer.

Schema Design:
- Input: projected-coordinate export (one row per entity and time unit, D1/D2 columns)
- Parameters: validated with Pydantic, snake_case or camelCase field names
- Output: flat, read-only statistics rebuilt per request
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from projection_clustering.utils.error_handling import InvalidDatasetError


# =============================================================================
# ENUMS
# =============================================================================


class ClusterAlgorithm(str, Enum):
    """Supported clustering algorithms."""

    DBSCAN = "dbscan"
    KMEANS = "kmeans"
    HIERARCHICAL = "hierarchical"


NOISE_LABEL = -1


# =============================================================================
# DATASET MODELS
# =============================================================================


@dataclass(frozen=True)
class Point:
    """A projected 2-D coordinate."""

    x: float
    y: float

    def __post_init__(self):
        try:
            x, y = float(self.x), float(self.y)
        except (TypeError, ValueError) as e:
            raise InvalidDatasetError(
                f"Point coordinates must be numeric, got ({self.x!r}, {self.y!r})"
            ) from e
        if not (math.isfinite(x) and math.isfinite(y)):
            raise InvalidDatasetError(
                f"Point coordinates must be finite, got ({x}, {y})",
                details={"x": x, "y": y},
            )
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Record:
    """One dataset row: a point plus passthrough attributes the engine never reads."""

    point: Point
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)


PointLike = Union[Point, Record, Sequence[float]]


def _to_record(item: PointLike) -> Record:
    if isinstance(item, Record):
        return item
    if isinstance(item, Point):
        return Record(point=item)
    try:
        x, y = item
    except (TypeError, ValueError) as e:
        raise InvalidDatasetError(f"Expected an (x, y) pair, got {item!r}") from e
    return Record(point=Point(x, y))


class Dataset:
    """
    Ordered, immutable snapshot of records.

    Record order defines the index space of every labeling produced from it.
    """

    def __init__(self, records: Iterable[PointLike] = ()):
        self._records: Tuple[Record, ...] = tuple(_to_record(r) for r in records)

    @classmethod
    def from_points(cls, points: Union[np.ndarray, Iterable[PointLike]]) -> "Dataset":
        """Build a dataset from (x, y) pairs or an (n, 2) array."""
        if isinstance(points, np.ndarray):
            if points.ndim != 2 or (points.size and points.shape[1] != 2):
                raise InvalidDatasetError(
                    f"Expected an (n, 2) coordinate array, got shape {points.shape}"
                )
            points = points.tolist()
        return cls(points)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        x_field: str = "D1",
        y_field: str = "D2",
    ) -> "Dataset":
        """
        Build a dataset from dict rows of a projected-coordinate export.

        Args:
            rows: Mappings holding the two coordinate fields plus any passthrough fields
            x_field: Name of the first coordinate field
            y_field: Name of the second coordinate field

        Returns:
            Dataset with every non-coordinate field kept as a record attribute
        """
        records = []
        for index, row in enumerate(rows):
            if x_field not in row or y_field not in row:
                raise InvalidDatasetError(
                    f"Row {index} is missing coordinate field '{x_field}' or '{y_field}'",
                    details={"row": index, "fields": sorted(row.keys())},
                )
            attributes = {k: v for k, v in row.items() if k not in (x_field, y_field)}
            records.append(Record(point=Point(row[x_field], row[y_field]), attributes=attributes))
        return cls(records)

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    @property
    def points(self) -> List[Point]:
        return [r.point for r in self._records]

    def coordinates(self) -> np.ndarray:
        """Return a fresh (n, 2) float array of the record coordinates."""
        if not self._records:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([r.point.as_tuple() for r in self._records], dtype=np.float64)

    def filter(
        self,
        year_range: Optional[Tuple[Any, Any]] = None,
        entities: Optional[Iterable[Any]] = None,
        year_field: str = "year",
        entity_field: str = "country",
    ) -> "Dataset":
        """
        Restrict the dataset to a time window and an entity selection.

        Args:
            year_range: Inclusive (start, end) bounds on ``year_field``; None keeps all
            entities: Entities to keep; None or a selection containing "all" keeps all
            year_field: Record attribute holding the time unit
            entity_field: Record attribute holding the entity identity

        Returns:
            New Dataset preserving the original record order

        Raises:
            InvalidDatasetError: If a record year cannot be compared with the bounds
        """
        selection = None
        if entities is not None:
            selection = set(entities)
            if "all" in selection:
                selection = None

        kept = []
        for index, record in enumerate(self._records):
            if year_range is not None:
                year = record.get(year_field)
                if year is None:
                    continue
                try:
                    in_range = year_range[0] <= year <= year_range[1]
                except TypeError as e:
                    raise InvalidDatasetError(
                        f"Record {index} has a {year_field} value {year!r} that cannot be "
                        f"compared with {year_range!r}",
                        details={"record": index, "field": year_field, "value": repr(year)},
                    ) from e
                if not in_range:
                    continue
            if selection is not None and record.get(entity_field) not in selection:
                continue
            kept.append(record)

        return Dataset(kept)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __getitem__(self, index: int) -> Record:
        return self._records[index]

    def __repr__(self) -> str:
        return f"Dataset(n_records={len(self._records)})"


def as_dataset(data: Union[Dataset, np.ndarray, Iterable[PointLike]]) -> Dataset:
    """Coerce a Dataset, coordinate array or iterable of points into a Dataset."""
    if isinstance(data, Dataset):
        return data
    return Dataset.from_points(data)


# =============================================================================
# PARAMETER MODELS
# =============================================================================


class DBSCANParams(BaseModel):
    """DBSCAN parameters."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    epsilon: float = Field(..., gt=0.0, allow_inf_nan=False, description="Neighborhood radius (inclusive)")
    min_samples: int = Field(..., ge=1, strict=True, alias="minSamples", description="Neighborhood size, self included, for a core point")


class KMeansParams(BaseModel):
    """K-Means parameters."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    k: int = Field(..., ge=1, strict=True, description="Number of clusters")


class HierarchicalParams(BaseModel):
    """Single-linkage agglomerative parameters."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    max_clusters: int = Field(..., ge=1, strict=True, alias="maxClusters", description="Target cluster count")


PARAM_MODELS = {
    ClusterAlgorithm.DBSCAN.value: DBSCANParams,
    ClusterAlgorithm.KMEANS.value: KMeansParams,
    ClusterAlgorithm.HIERARCHICAL.value: HierarchicalParams,
}


# =============================================================================
# STATISTICS MODELS
# =============================================================================


class ClusterStats(BaseModel):
    """Per-cluster counts derived from a labeling."""

    model_config = ConfigDict(frozen=True)

    algorithm: str = Field(..., description="Algorithm that produced the labeling")
    n_clusters: int = Field(..., ge=0, description="Number of clusters reported by the algorithm")
    total_points: int = Field(..., ge=0, description="Dataset length")
    cluster_sizes: Dict[int, int] = Field(default_factory=dict, description="Cluster id -> member count")
    noise_points: int = Field(default=0, ge=0, description="Points labeled as noise")
