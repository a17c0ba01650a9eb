"""Exceptions raised by the service layer.

Endpoints translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""


class EngineError(Exception):
    """Base class for expected, caller-visible failures."""

    status_code = 400


class InvalidRequestError(EngineError):
    """Malformed input such as a missing reason or unknown vote value."""


class ForbiddenActionError(EngineError):
    """Well-formed request that the rules do not allow (self-vote, closed case...)."""


class NotFoundError(EngineError):
    """The referenced report, post or comment does not exist."""

    status_code = 404
