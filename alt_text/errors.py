"""Exception taxonomy for alt text generation."""


class AltTextError(RuntimeError):
    """Base class for every failure raised by this package."""


class ConfigurationError(AltTextError):
    """Required credential, model or endpoint missing, or provider unrecognized."""


class FetchError(AltTextError):
    """The image could not be retrieved."""


class UpstreamError(AltTextError):
    """The vision provider returned an error payload or no usable text."""


class TransportError(AltTextError):
    """Transport-level HTTP failure (connection, timeout, protocol)."""
