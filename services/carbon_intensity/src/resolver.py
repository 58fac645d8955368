from .exceptions import EmptyRequestModeError
from .models import EndpointKind, Plan, RequestMode, WideSource


def resolve(mode: RequestMode) -> Plan:
    """Map selection flags to the endpoints to fetch and datasets to assemble.

    A single regional fetch feeds both the regional wide and long datasets.
    """
    fetch_regional = mode.want_regional_wide or mode.want_regional_long

    fetch = [
        kind
        for kind, wanted in (
            (EndpointKind.INTENSITY, mode.want_intensity),
            (EndpointKind.GENERATION, mode.want_generation),
            (EndpointKind.REGIONAL, fetch_regional),
        )
        if wanted
    ]
    if not fetch:
        raise EmptyRequestModeError("request mode selects no dataset")

    wide_sources = [
        source
        for source, wanted in (
            (WideSource.INTENSITY, mode.want_intensity),
            (WideSource.GENERATION, mode.want_generation),
            (WideSource.REGIONAL_WIDE, mode.want_regional_wide),
        )
        if wanted
    ]

    return Plan(
        fetch=tuple(fetch),
        build_regional_wide=mode.want_regional_wide,
        wide_sources=tuple(wide_sources),
        produce_long=mode.want_regional_long,
    )
