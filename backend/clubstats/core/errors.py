from __future__ import annotations


class EngineError(Exception):
    """Base class for errors surfaced to the presentation layer."""

    kind = "engine_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EngineError):
    # self-vote, vote target not a confirmed participant, bad period...
    kind = "validation_error"
    status_code = 400


class ConflictError(EngineError):
    # duplicate vote, concurrent double-finalize
    kind = "conflict_error"
    status_code = 409


class StateError(EngineError):
    # vote after finalize, reopen when not finalized, finalize twice
    kind = "state_error"
    status_code = 409


class NotFoundError(EngineError):
    kind = "not_found"
    status_code = 404


class UpstreamError(EngineError):
    # store unreachable or query failed
    kind = "upstream_error"
    status_code = 502
