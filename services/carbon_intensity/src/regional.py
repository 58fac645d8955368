import pandas as pd
import structlog

from .assembler import deduplicate_keys
from .normalizer import KEY_COLUMNS, REGION_ID, REGION_NAME, REGIONAL_KEY_COLUMNS

logger = structlog.get_logger()


def regional_measures(long: pd.DataFrame) -> list[str]:
    """Measure columns of a regional long frame: forecast, index and fuels."""
    excluded = {*REGIONAL_KEY_COLUMNS, REGION_NAME}
    return [column for column in long.columns if column not in excluded]


def widen(long: pd.DataFrame) -> pd.DataFrame:
    """Pivot regional long records to one row per half hour.

    Each measure becomes one column per region, named ``<measure>_<regionid>``,
    ordered by measure then region. A region absent from some half hours
    leaves missing values in those rows.
    """
    long = deduplicate_keys(long, REGIONAL_KEY_COLUMNS, "regional_long")
    measures = regional_measures(long)

    if long.empty:
        return pd.DataFrame(columns=KEY_COLUMNS)

    regions = sorted(long[REGION_ID].unique())
    wide = long.pivot(index=KEY_COLUMNS, columns=REGION_ID, values=measures)
    # unstack groups columns by dtype, restore measure-major order
    wide = wide.reindex(columns=pd.MultiIndex.from_product([measures, regions]))
    wide.columns = [f"{measure}_{region}" for measure, region in wide.columns]
    wide = wide.reset_index()

    logger.info(
        "regional_widened",
        rows=len(wide),
        regions=len(regions),
        measures=len(measures),
    )
    return wide
