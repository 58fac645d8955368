from .models import EndpointKind, TimeWindow


class CarbonPipelineError(Exception):
    """Base class for pipeline failures."""


class FetchError(CarbonPipelineError):
    """An endpoint could not be fetched (transport, status or body)."""

    def __init__(self, kind: EndpointKind, window: TimeWindow, reason: str):
        self.kind = kind
        self.window = window
        self.reason = reason
        super().__init__(
            f"{kind.value} fetch failed for {window.start} -> {window.end}: {reason}"
        )


class MalformedResponseError(CarbonPipelineError):
    """A response lacked an expected field or had an unexpected shape."""

    def __init__(self, kind: EndpointKind, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(f"malformed {kind.value} response: {reason}")


class EmptyRequestModeError(CarbonPipelineError, ValueError):
    """No dataset was requested."""


class JoinAmbiguityWarning(UserWarning):
    """Duplicate keys were found and all but the first occurrence dropped."""
