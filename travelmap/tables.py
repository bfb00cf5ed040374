"""Location and connection tables: loading, validation and frame conversion."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Dict, Iterator, List, Tuple, Type, TypeVar, Union

import pandas as pd
import pydantic

from travelmap.errors import ValidationError
from travelmap.logging_config import get_logger
from travelmap.schemas import Connection, Location

logger = get_logger(__name__)

LOCATION_COLUMNS = ["id", "longitude", "latitude", "name"]
CONNECTION_COLUMNS = ["from_id", "to_id", "weight", "category"]

# Header aliases accepted in .csv inputs
COLUMN_ALIASES = {
    "lon": "longitude",
    "long": "longitude",
    "lng": "longitude",
    "lat": "latitude",
    "from": "from_id",
    "to": "to_id",
}

# Rendering intensity per number of visits
VISIT_WEIGHTS: Dict[int, float] = {
    1: 0.6,
    2: 0.75,
    3: 0.8,
    4: 0.9,
    5: 1.0,
}

Source = Union[str, Path, IO[str]]
ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def weight_for_visits(visits: int) -> float:
    """Edge weight for a trip visited ``visits`` times."""
    try:
        return VISIT_WEIGHTS[visits]
    except KeyError:
        raise ValidationError(
            f"No weight defined for {visits} visit(s); expected one of {sorted(VISIT_WEIGHTS)}"
        ) from None


@dataclass(frozen=True)
class LocationTable:
    """Immutable set of locations, unique by id and by name."""

    rows: Tuple[Location, ...]

    def __post_init__(self) -> None:
        _reject_duplicates((row.id for row in self.rows), "location id")
        _reject_duplicates((row.name for row in self.rows), "location name")

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Location]:
        return iter(self.rows)

    @property
    def ids(self) -> List[int]:
        return [row.id for row in self.rows]

    def coordinates(self) -> Dict[int, Tuple[float, float]]:
        return {row.id: (row.longitude, row.latitude) for row in self.rows}

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "LocationTable":
        return cls(rows=_to_models(df, Location, LOCATION_COLUMNS, "location"))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [row.model_dump() for row in self.rows],
            columns=LOCATION_COLUMNS,
        )


@dataclass(frozen=True)
class ConnectionTable:
    """Immutable list of connections; duplicates and reciprocal pairs are kept."""

    rows: Tuple[Connection, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Connection]:
        return iter(self.rows)

    @property
    def categories(self) -> List[str]:
        """Distinct categories, sorted like factor levels."""
        return sorted({row.category for row in self.rows})

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "ConnectionTable":
        return cls(rows=_to_models(df, Connection, CONNECTION_COLUMNS, "connection"))

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(
            [row.model_dump() for row in self.rows],
            columns=CONNECTION_COLUMNS,
        )
        df["category"] = pd.Categorical(df["category"], categories=self.categories)
        return df


def load_locations(source: Source) -> LocationTable:
    """Load locations from delimited text (``id lon lat name``)."""
    df = _read_table(source, LOCATION_COLUMNS)
    table = LocationTable.from_frame(df)
    logger.debug("Loaded %d locations from %s", len(table), _describe_source(source))
    return table


def load_connections(source: Source) -> ConnectionTable:
    """Load connections from delimited text (``from to weight category``)."""
    df = _read_table(source, CONNECTION_COLUMNS)
    table = ConnectionTable.from_frame(df)
    logger.debug("Loaded %d connections from %s", len(table), _describe_source(source))
    return table


def check_references(locations: LocationTable, connections: ConnectionTable) -> None:
    """Ensure every connection endpoint names an existing location.

    Raises:
        ValidationError: listing each offending connection row and id
    """
    known = set(locations.ids)
    problems = []
    for row_no, connection in enumerate(connections, start=1):
        for field in ("from_id", "to_id"):
            value = getattr(connection, field)
            if value not in known:
                problems.append(f"row {row_no}: {field}={value}")
    if problems:
        raise ValidationError(
            "Connections reference unknown location ids: " + "; ".join(problems)
        )


def _read_table(source: Source, columns: List[str]) -> pd.DataFrame:
    """Read a headered .csv file, or headerless whitespace text quoted with '.

    The last column (name or category) is always read as text, so quoted
    labels such as '1984' stay strings.
    """
    label = _describe_source(source)
    try:
        if isinstance(source, (str, Path)) and Path(source).suffix.lower() == ".csv":
            # all text; pydantic coerces the numeric fields
            df = pd.read_csv(source, dtype=str)
            df = df.rename(columns=lambda c: COLUMN_ALIASES.get(c.strip().lower(), c.strip().lower()))
            missing = [c for c in columns if c not in df.columns]
            if missing:
                raise ValidationError(f"{label} is missing columns: {', '.join(missing)}")
            return df[columns]
        df = pd.read_csv(
            source,
            sep=r"\s+",
            header=None,
            quotechar="'",
            dtype={len(columns) - 1: str},
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ValidationError(f"Could not parse {label}: {exc}") from exc

    if df.shape[1] != len(columns):
        raise ValidationError(
            f"Could not parse {label}: expected {len(columns)} fields per row "
            f"({' '.join(columns)}), found {df.shape[1]}; quote multi-word values with '"
        )
    df.columns = columns
    return df


def _to_models(
    df: pd.DataFrame,
    model: Type[ModelT],
    columns: List[str],
    label: str,
) -> Tuple[ModelT, ...]:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValidationError(f"{label} table is missing columns: {', '.join(missing)}")

    rows = []
    for row_no, record in enumerate(df[columns].to_dict(orient="records"), start=1):
        # numpy scalars -> python values
        record = {k: (v.item() if hasattr(v, "item") else v) for k, v in record.items()}
        try:
            rows.append(model(**record))
        except pydantic.ValidationError as exc:
            details = ", ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise ValidationError(f"Invalid {label} row {row_no} {record}: {details}") from exc
    return tuple(rows)


def _reject_duplicates(values: Iterator, label: str) -> None:
    seen = set()
    duplicates = []
    for value in values:
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    if duplicates:
        raise ValidationError(f"Duplicate {label}(s): {', '.join(str(d) for d in duplicates)}")


def _describe_source(source: Source) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", "<text>")
