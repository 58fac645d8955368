import httpx
import structlog

from .config import settings
from .exceptions import FetchError
from .models import EndpointKind, TimeWindow

logger = structlog.get_logger()


class CarbonIntensityClient:
    """Client for fetching raw documents from the GB Carbon Intensity API."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self._base_url = (base_url or settings.carbon_api_base_url).rstrip("/")
        self._timeout = timeout or settings.request_timeout_seconds
        self._paths = {
            EndpointKind.INTENSITY: settings.intensity_path,
            EndpointKind.GENERATION: settings.generation_path,
            EndpointKind.REGIONAL: settings.regional_path,
        }

    def build_url(self, kind: EndpointKind, window: TimeWindow) -> str:
        """Populate the endpoint template for a window."""
        path = self._paths[kind].format(start=window.start, end=window.end)
        return f"{self._base_url}{path}"

    def fetch(self, kind: EndpointKind, window: TimeWindow) -> dict:
        """Fetch the raw JSON document for one endpoint and window."""
        url = self.build_url(kind, window)

        try:
            with httpx.Client(timeout=self._timeout) as client:
                logger.info("fetching_endpoint", kind=kind.value, url=url)
                response = client.get(url, headers={"Accept": "application/json"})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error("endpoint_fetch_failed", kind=kind.value, url=url, error=str(e))
            raise FetchError(kind, window, str(e)) from e
        except ValueError as e:
            logger.error("endpoint_body_undecodable", kind=kind.value, url=url, error=str(e))
            raise FetchError(kind, window, f"invalid JSON body: {e}") from e

        entries = data.get("data") if isinstance(data, dict) else None
        logger.info(
            "endpoint_fetched",
            kind=kind.value,
            entries=len(entries) if isinstance(entries, list) else None,
        )
        return data
