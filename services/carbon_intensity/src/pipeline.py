import pandas as pd
import structlog

from .assembler import assemble
from .carbon_client import CarbonIntensityClient
from .feature_engineer import derive
from .models import EndpointKind, Output, RequestMode, TimeWindow, WideSource
from .normalizer import normalize
from .packager import package
from .regional import widen
from .resolver import resolve

logger = structlog.get_logger()

_WIDE_SOURCE_BY_KIND = {
    EndpointKind.INTENSITY: WideSource.INTENSITY,
    EndpointKind.GENERATION: WideSource.GENERATION,
}


def run(
    window: TimeWindow,
    mode: RequestMode,
    client: CarbonIntensityClient | None = None,
) -> Output:
    """Fetch, normalize, join and enrich the datasets selected by ``mode``.

    Fetch and normalization errors propagate and abort the whole run.
    """
    plan = resolve(mode)
    client = client or CarbonIntensityClient()

    logger.info(
        "run_starting",
        start=window.start,
        end=window.end,
        fetch=[kind.value for kind in plan.fetch],
        shape=plan.shape.value,
    )

    normalized: dict[EndpointKind, pd.DataFrame] = {}
    for kind in plan.fetch:
        raw = client.fetch(kind, window)
        normalized[kind] = normalize(kind, raw)

    wide_inputs: dict[WideSource, pd.DataFrame] = {
        _WIDE_SOURCE_BY_KIND[kind]: frame
        for kind, frame in normalized.items()
        if kind in _WIDE_SOURCE_BY_KIND
    }
    if plan.build_regional_wide:
        wide_inputs[WideSource.REGIONAL_WIDE] = widen(normalized[EndpointKind.REGIONAL])

    wide = derive(assemble(wide_inputs)) if plan.produces_wide else None
    long = derive(normalized[EndpointKind.REGIONAL]) if plan.produce_long else None

    output = package(wide=wide, long=long)
    logger.info(
        "run_completed",
        start=window.start,
        end=window.end,
        shape=output.shape.value,
        wide_rows=len(wide) if wide is not None else None,
        long_rows=len(long) if long is not None else None,
    )
    return output
