"""
Detection error taxonomy.

Adapter errors never leave an adapter: `ModelAdapter.detect` converts them into
a failed `DetectionOpinion`. `AllModelsFailed` is the only error a caller of
`ConsensusEngine.detect` has to handle.
"""


class DetectionError(Exception):
    """Base class for every error raised by the detection core."""


class AdapterError(DetectionError):
    """A single model could not produce an opinion."""

    kind = "upstream_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AdapterTimeout(AdapterError):
    kind = "timeout"


class AdapterAuthFailure(AdapterError):
    kind = "auth_failure"


class AdapterMalformedResponse(AdapterError):
    kind = "malformed_response"


class AdapterRateLimited(AdapterError):
    kind = "rate_limited"


class InvalidInput(AdapterMalformedResponse):
    """Empty text, or a breakdown outside [0,100] / not summing to 100."""


class AllModelsFailed(DetectionError):
    """No adapter succeeded, so there is nothing to aggregate."""

    def __init__(self, errors: list[str]):
        super().__init__("All AI models failed to analyze the text")
        self.errors = errors


class EnsembleConfigError(DetectionError):
    """Raised once at engine construction for an invalid adapter set."""
