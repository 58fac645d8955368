import re

import pandas as pd
import structlog

from .models import Season, SeverityIndex

logger = structlog.get_logger()

# Ordered so that comparisons, sorting and min/max follow the declared levels
INDEX_DTYPE = pd.CategoricalDtype(SeverityIndex.levels(), ordered=True)
SEASON_DTYPE = pd.CategoricalDtype(Season.levels(), ordered=True)

_SEASON_MONTHS = {
    Season.SPRING: ("04", "05", "06"),
    Season.SUMMER: ("07", "08", "09"),
    Season.FALL: ("10", "11", "12"),
    Season.WINTER: ("01", "02", "03"),
}
SEASON_BY_MONTH = {
    month: season.value for season, months in _SEASON_MONTHS.items() for month in months
}

_INDEX_COLUMN = re.compile(r"^index(_.+)?$")


def index_columns(frame: pd.DataFrame) -> list[str]:
    """The national ``index`` column and any per-region ``index_<regionid>`` columns."""
    return [column for column in frame.columns if _INDEX_COLUMN.match(str(column))]


def derive(frame: pd.DataFrame) -> pd.DataFrame:
    """Add calendar and season fields and encode ordinal categories.

    Calendar fields are sliced from the ``from`` timestamp text. A month outside
    01-12 yields a missing season and an unparseable date a missing date, per
    row; nothing here raises on bad values.
    """
    derived = frame.copy()
    start = derived["from"].astype(str)

    derived["year"] = start.str[0:4]
    derived["month"] = start.str[5:7]
    derived["year_month"] = derived["year"] + derived["month"]
    derived["date"] = pd.to_datetime(start.str[0:10], format="%Y-%m-%d", errors="coerce").dt.date
    derived["season"] = derived["month"].map(SEASON_BY_MONTH).astype(SEASON_DTYPE)

    encoded = index_columns(derived)
    for column in encoded:
        derived[column] = derived[column].astype(INDEX_DTYPE)

    undefined_seasons = int(derived["season"].isna().sum())
    if undefined_seasons:
        logger.warning("season_undefined", rows=undefined_seasons)

    logger.debug("features_derived", rows=len(derived), encoded_columns=len(encoded))
    return derived
