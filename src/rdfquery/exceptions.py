"""Exception hierarchy for :mod:`rdfquery`.

Local validation errors (:class:`StateError`, :class:`QueryTypeError`,
:class:`UnsupportedFeatureError`) are raised while a query is built or
generated, before anything is sent to a backend.  Backend errors
(:class:`BackendUnavailableError`, :class:`ResultDecodeError`) carry the
endpoint identity so callers can tell which store failed.
"""

from __future__ import annotations


class RdfQueryError(Exception):
    """Base exception for rdfquery errors."""

    pass


class StateError(RdfQueryError):
    """Raised when the query accumulator holds conflicting settings."""

    pass


class QueryTypeError(RdfQueryError, TypeError):
    """Raised when an accumulator call receives an argument of the wrong shape."""

    pass


class UnsupportedFeatureError(RdfQueryError):
    """Raised when the chosen query language cannot express the query."""

    pass


class BackendError(RdfQueryError):
    """Base class for failures reported by a backend."""

    def __init__(self, endpoint: str, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: {message}")


class BackendUnavailableError(BackendError):
    """Raised on transport failures: refused connections, timeouts, non-2xx."""

    def __init__(
        self,
        endpoint: str,
        cause: BaseException | str,
        status: int | None = None,
    ) -> None:
        self.cause = cause
        self.status = status
        if status is not None:
            message = f"could not query endpoint, server said HTTP {status}: {cause}"
        else:
            message = f"could not reach endpoint: {cause}"
        super().__init__(endpoint, message)


class ResultDecodeError(BackendError):
    """Raised when a response body cannot be decoded into result rows."""

    def __init__(self, endpoint: str, detail: str) -> None:
        self.detail = detail
        super().__init__(endpoint, f"malformed result: {detail}")
