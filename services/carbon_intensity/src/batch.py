import time

import pandas as pd
import structlog

from .carbon_client import CarbonIntensityClient
from .config import settings
from .models import Output, RequestMode, TimeWindow
from .packager import package
from .pipeline import run

logger = structlog.get_logger()


def monthly_windows(window: TimeWindow) -> list[TimeWindow]:
    """Split a window at calendar month boundaries."""
    start = window.start_datetime
    end = window.end_datetime

    month_starts = pd.date_range(start=start, end=end, freq="MS")
    boundaries = [start, *(b for b in month_starts if start < b < end), end]

    return [
        TimeWindow.from_datetimes(a, b)
        for a, b in zip(boundaries[:-1], boundaries[1:])
    ]


def run_batch(
    windows: list[TimeWindow],
    mode: RequestMode,
    client: CarbonIntensityClient | None = None,
    delay: float | None = None,
) -> Output:
    """Run the pipeline once per window and stack same-shaped outputs by row.

    Any window failing aborts the batch.
    """
    if not windows:
        raise ValueError("run_batch needs at least one window")

    client = client or CarbonIntensityClient()
    delay = settings.rate_limit_delay if delay is None else delay

    logger.info("batch_starting", windows=len(windows), mode=mode.model_dump())

    wide_parts: list[pd.DataFrame] = []
    long_parts: list[pd.DataFrame] = []
    for i, window in enumerate(windows):
        if i > 0 and delay:
            # Rate limiting
            time.sleep(delay)

        output = run(window, mode, client=client)
        if output.wide is not None:
            wide_parts.append(output.wide)
        if output.long is not None:
            long_parts.append(output.long)

        logger.info(
            "batch_progress",
            processed=i + 1,
            total=len(windows),
            start=window.start,
            end=window.end,
        )

    wide = pd.concat(wide_parts, ignore_index=True) if wide_parts else None
    long = pd.concat(long_parts, ignore_index=True) if long_parts else None

    logger.info(
        "batch_completed",
        wide_rows=len(wide) if wide is not None else None,
        long_rows=len(long) if long is not None else None,
    )
    return package(wide=wide, long=long)
