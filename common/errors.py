"""Error taxonomy for the pulse pipeline.

Market data problems are deliberately absent: that adapter is best-effort
and reports failures as a missing value, never as an exception.
"""


class PulseError(Exception):
    """Base class for failures that abort a pulse check."""


class ConfigurationError(PulseError):
    """A credential required for this run is missing."""


class UpstreamError(PulseError):
    """A news or language-model provider call failed (transport, HTTP, payload)."""
