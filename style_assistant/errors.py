from __future__ import annotations


class UpstreamError(Exception):
    """Raised when an external collaborator (feed or generation API) cannot be used."""


class NetworkError(UpstreamError):
    """The feed or generation call failed before a usable response arrived."""


class MalformedResponse(UpstreamError):
    """The collaborator answered, but the payload does not have the expected shape."""
