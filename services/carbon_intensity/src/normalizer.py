"""Flatten Carbon Intensity API documents into rectangular DataFrames.

Every endpoint returns ``{"data": [...]}`` with entries nested up to three
levels deep. Normalization is a chain of small steps, each handling one level
of nesting and raising ``ValueError`` on a shape it does not expect:

- ``explode_list``: one row per element of a list-of-objects column
- ``flatten_nested_object``: object column -> sibling columns
- ``pivot_long_to_wide``: one column per distinct name, one row per key group

``normalize`` dispatches on the endpoint kind and turns step failures into
``MalformedResponseError``.
"""

import pandas as pd
import structlog

from .exceptions import MalformedResponseError
from .models import EndpointKind

logger = structlog.get_logger()

KEY_COLUMNS = ["from", "to"]
REGION_ID = "regionid"
REGION_NAME = "shortname"
REGIONAL_KEY_COLUMNS = [*KEY_COLUMNS, REGION_ID]

FUEL_FIELD = "fuel"
PERCENT_FIELD = "perc"

_ROW_ID = "_row"


def explode_list(frame: pd.DataFrame, column: str) -> pd.DataFrame:
    """Emit one row per list element, the element's keys becoming sibling columns."""
    for position, cell in enumerate(frame[column]):
        if not _is_object_list(cell):
            raise ValueError(
                f"'{column}' must be a non-empty list of objects (row {position})"
            )

    exploded = frame.explode(column, ignore_index=True)
    expanded = pd.DataFrame(exploded[column].tolist(), index=exploded.index)

    clashes = set(expanded.columns) & (set(frame.columns) - {column})
    if clashes:
        raise ValueError(f"'{column}' elements shadow parent columns: {sorted(clashes)}")

    return pd.concat([exploded.drop(columns=column), expanded], axis=1)


def flatten_nested_object(
    frame: pd.DataFrame,
    column: str,
    required: tuple[str, ...],
    optional: tuple[str, ...] = (),
) -> pd.DataFrame:
    """Replace an object column with one sibling column per field."""
    for position, cell in enumerate(frame[column]):
        if not isinstance(cell, dict):
            raise ValueError(f"'{column}' must be an object (row {position})")
        missing = [field for field in required if field not in cell]
        if missing:
            raise ValueError(f"'{column}' is missing {missing} (row {position})")

    fields = [*required, *optional]
    flat = pd.DataFrame(
        [{field: cell.get(field) for field in fields} for cell in frame[column]],
        columns=fields,
        index=frame.index,
    )
    return pd.concat([frame.drop(columns=column), flat], axis=1)


def pivot_long_to_wide(
    frame: pd.DataFrame,
    keys: list[str],
    columns: str,
    values: str,
) -> pd.DataFrame:
    """Spread ``values`` into one column per distinct ``columns`` name per key group.

    Column names keep their first-seen order. A name that is missing, or that
    appears twice within one key group, is rejected, as is a missing value.
    """
    if frame.empty:
        return pd.DataFrame(columns=keys)

    for required in (columns, values):
        if required not in frame.columns:
            raise ValueError(f"'{required}' field is absent")
    if frame[columns].isna().any():
        raise ValueError(f"'{columns}' name is missing")
    missing_values = frame[values].isna()
    if missing_values.any():
        name = frame.loc[missing_values, columns].iloc[0]
        raise ValueError(f"'{values}' is missing for {name!r}")

    duplicated = frame.duplicated(subset=[*keys, columns])
    if duplicated.any():
        name = frame.loc[duplicated, columns].iloc[0]
        raise ValueError(f"'{columns}' value {name!r} is duplicated within one group")

    frame = frame.assign(**{values: pd.to_numeric(frame[values])})
    wide = frame.pivot(index=keys, columns=columns, values=values)
    wide.columns.name = None

    order = list(dict.fromkeys(frame[columns]))
    return wide[order].reset_index()


def normalize(kind: EndpointKind, raw: dict) -> pd.DataFrame:
    """Normalize one raw document for one endpoint kind."""
    normalizers = {
        EndpointKind.INTENSITY: normalize_intensity,
        EndpointKind.GENERATION: normalize_generation,
        EndpointKind.REGIONAL: normalize_regional,
    }

    try:
        frame = normalizers[kind](raw)
    except (KeyError, TypeError, ValueError) as e:
        logger.error("normalization_failed", kind=kind.value, error=str(e))
        raise MalformedResponseError(kind, str(e)) from e

    logger.info("response_normalized", kind=kind.value, rows=len(frame), columns=len(frame.columns))
    return frame


def normalize_intensity(raw: dict) -> pd.DataFrame:
    """One row per half hour: from, to, forecast, actual, index."""
    frame = _entries(raw, "intensity")
    frame = flatten_nested_object(
        frame, "intensity", required=("forecast", "index"), optional=("actual",)
    )
    frame = _to_numeric(frame, ["forecast", "actual"])
    return frame[[*KEY_COLUMNS, "forecast", "actual", "index"]]


def normalize_generation(raw: dict) -> pd.DataFrame:
    """One row per half hour with one percentage column per fuel."""
    frame = _entries(raw, "generationmix")
    frame, fuels = _pivot_generation_mix(frame)
    return frame[[*KEY_COLUMNS, *fuels]]


def normalize_regional(raw: dict) -> pd.DataFrame:
    """One row per half hour and region: forecast, index and fuel percentages."""
    frame = _entries(raw, "regions")
    if frame.empty:
        return pd.DataFrame(columns=[*REGIONAL_KEY_COLUMNS, REGION_NAME, "forecast", "index"])

    regions = explode_list(frame, "regions")
    _require_columns(regions, [REGION_ID, REGION_NAME, "intensity", "generationmix"], "region")

    regions = flatten_nested_object(regions, "intensity", required=("forecast", "index"))
    regions = _to_numeric(regions, ["forecast"])
    regions, fuels = _pivot_generation_mix(regions)
    return regions[[*REGIONAL_KEY_COLUMNS, REGION_NAME, "forecast", "index", *fuels]]


def _entries(raw: dict, nested: str) -> pd.DataFrame:
    """Top-level ``data`` entries with their key columns and one nested field."""
    if not isinstance(raw, dict) or not isinstance(raw.get("data"), list):
        raise ValueError("document has no 'data' list")

    entries = raw["data"]
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"entry {position} is not an object")
        missing = [field for field in (*KEY_COLUMNS, nested) if field not in entry]
        if missing:
            raise ValueError(f"entry {position} is missing {missing}")

    return pd.DataFrame(entries, columns=[*KEY_COLUMNS, nested])


def _pivot_generation_mix(frame: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """Explode and pivot each row's ``generationmix`` into fuel columns."""
    if frame.empty:
        return frame.drop(columns="generationmix"), []

    frame = frame.reset_index(drop=True).assign(**{_ROW_ID: range(len(frame))})
    mix = explode_list(frame[[_ROW_ID, "generationmix"]], "generationmix")
    shares = pivot_long_to_wide(mix, [_ROW_ID], FUEL_FIELD, PERCENT_FIELD)

    fuels = [column for column in shares.columns if column != _ROW_ID]
    merged = frame.drop(columns="generationmix").merge(shares, on=_ROW_ID, how="left")
    return merged.drop(columns=_ROW_ID), fuels


def _require_columns(frame: pd.DataFrame, names: list[str], where: str) -> None:
    """Raise unless every named column exists and has no missing values."""
    for name in names:
        if name not in frame.columns or frame[name].isna().any():
            raise ValueError(f"{where} is missing '{name}'")


def _to_numeric(frame: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Coerce the given columns to numbers."""
    return frame.assign(**{column: pd.to_numeric(frame[column]) for column in columns})


def _is_object_list(cell) -> bool:
    """True for a non-empty list whose items are all objects."""
    return (
        isinstance(cell, list)
        and len(cell) > 0
        and all(isinstance(item, dict) for item in cell)
    )
