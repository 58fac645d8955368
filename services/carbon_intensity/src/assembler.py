import warnings
from functools import reduce

import pandas as pd
import structlog

from .exceptions import JoinAmbiguityWarning
from .models import WideSource
from .normalizer import KEY_COLUMNS

logger = structlog.get_logger()


def deduplicate_keys(frame: pd.DataFrame, keys: list[str], dataset: str) -> pd.DataFrame:
    """Keep the first row for each key, warning when later duplicates are dropped."""
    duplicated = frame.duplicated(subset=keys, keep="first")
    dropped = int(duplicated.sum())
    if not dropped:
        return frame

    logger.warning("duplicate_keys_dropped", dataset=dataset, keys=keys, dropped=dropped)
    warnings.warn(
        f"{dataset}: dropped {dropped} rows with duplicate {keys}, keeping first occurrence",
        JoinAmbiguityWarning,
        stacklevel=2,
    )
    return frame.loc[~duplicated].reset_index(drop=True)


def assemble(datasets: dict[WideSource, pd.DataFrame]) -> pd.DataFrame:
    """Full-outer join the given datasets on (from, to).

    Datasets are joined in WideSource order (intensity, generation,
    regional_wide), which only affects column order. Keys present in one
    input only get missing values in the other inputs' columns.
    """
    ordered = [
        deduplicate_keys(datasets[source], KEY_COLUMNS, source.value)
        for source in WideSource
        if source in datasets
    ]
    if not ordered:
        raise ValueError("assemble needs at least one dataset")

    assembled = reduce(
        lambda left, right: left.merge(right, on=KEY_COLUMNS, how="outer"),
        ordered,
    )

    logger.info(
        "datasets_assembled",
        sources=[source.value for source in WideSource if source in datasets],
        rows=len(assembled),
        columns=len(assembled.columns),
    )
    return assembled.reset_index(drop=True)
