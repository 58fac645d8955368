import copy
from unittest.mock import MagicMock

import pytest

from services.carbon_intensity.src.models import EndpointKind, TimeWindow

FUELS = ["biomass", "coal", "imports", "gas", "nuclear", "hydro", "solar", "wind"]

PERIODS = [
    ("2024-01-15T00:00Z", "2024-01-15T00:30Z"),
    ("2024-01-15T00:30Z", "2024-01-15T01:00Z"),
]


def _mix(percentages: list[float]) -> list[dict]:
    return [{"fuel": fuel, "perc": perc} for fuel, perc in zip(FUELS, percentages)]


@pytest.fixture
def fuels():
    """Fuel names used by the synthetic responses."""
    return list(FUELS)


@pytest.fixture
def sample_window():
    """One hour window covering the two synthetic half hours."""
    return TimeWindow(start="2024-01-15T00:00Z", end="2024-01-15T01:00Z")


@pytest.fixture
def sample_intensity_response():
    """Sample national intensity response; the second period has no actual."""
    return {
        "data": [
            {
                "from": PERIODS[0][0],
                "to": PERIODS[0][1],
                "intensity": {"forecast": 180, "actual": 175, "index": "moderate"},
            },
            {
                "from": PERIODS[1][0],
                "to": PERIODS[1][1],
                "intensity": {"forecast": 190, "index": "high"},
            },
        ]
    }


@pytest.fixture
def sample_generation_response():
    """Sample national generation mix response."""
    return {
        "data": [
            {
                "from": PERIODS[0][0],
                "to": PERIODS[0][1],
                "generationmix": _mix([5.0, 2.0, 10.0, 30.0, 15.0, 1.0, 2.0, 35.0]),
            },
            {
                "from": PERIODS[1][0],
                "to": PERIODS[1][1],
                "generationmix": _mix([5.2, 1.8, 9.5, 31.5, 14.9, 0.9, 1.9, 34.3]),
            },
        ]
    }


@pytest.fixture
def sample_regional_response():
    """Sample regional response: two half hours, regions 1 and 13."""
    forecasts = {1: [(30, "very low"), (35, "low")], 13: [(250, "high"), (230, "moderate")]}
    mixes = {
        1: _mix([2.0, 0.0, 0.0, 3.0, 15.0, 20.0, 0.0, 60.0]),
        13: _mix([8.0, 1.0, 20.0, 45.0, 10.0, 0.0, 1.0, 15.0]),
    }
    names = {1: "North Scotland", 13: "London"}

    return {
        "data": [
            {
                "from": start,
                "to": end,
                "regions": [
                    {
                        "regionid": region,
                        "dnoregion": f"DNO {region}",
                        "shortname": names[region],
                        "intensity": {
                            "forecast": forecasts[region][period][0],
                            "index": forecasts[region][period][1],
                        },
                        "generationmix": mixes[region],
                    }
                    for region in (1, 13)
                ],
            }
            for period, (start, end) in enumerate(PERIODS)
        ]
    }


@pytest.fixture
def fake_client(sample_intensity_response, sample_generation_response, sample_regional_response):
    """Client double returning the synthetic response for each endpoint kind."""
    responses = {
        EndpointKind.INTENSITY: sample_intensity_response,
        EndpointKind.GENERATION: sample_generation_response,
        EndpointKind.REGIONAL: sample_regional_response,
    }
    client = MagicMock()
    client.fetch.side_effect = lambda kind, window: copy.deepcopy(responses[kind])
    return client
