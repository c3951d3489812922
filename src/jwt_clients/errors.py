"""
Client error classes and transport error normalisation.

Every failure a client raises is a :class:`ClientError` carrying a ``code``
and a ``message``.  ``code`` is either an application code such as
``"ENOSERVICETOKEN"`` or an HTTP-style status such as ``404``.  Each client
raises its own subclass so callers can tell which service failed, but the
subclasses behave identically.

:func:`normalize_request_error` turns whatever the transport raised into one
of these errors.  The rules are applied top to bottom and the first match
wins:

============================================  ======  ================
Raw error                                     code    message
============================================  ======  ================
already an instance of the client's class     unchanged
``status_code`` 404                           404     ``"404"``
any other ``status_code`` S                   S       ``str(S)``
``error.code`` is ``ENOTFOUND``               502     ``ENOTFOUND``
``error.code`` is ``ECONNREFUSED``            503     ``ECONNREFUSED``
any other non-empty ``error.code`` C          500     C
``error`` present without a code              500     ``EUNSPECIFIED``
neither ``status_code`` nor ``error``         500     ``ENOERROR``
============================================  ======  ================

A 404 from the user datastore means the record does not exist or has
expired, so callers commonly treat it as "no data yet".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Type, Union


Code = Union[str, int]


class ClientError(Exception):
    """Base class for errors raised by the service clients."""

    def __init__(self, code: Code, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message if message is not None else str(code)
        super().__init__(self.message)

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}(code={self.code!r}, message={self.message!r})"


class JwtClientError(ClientError):
    """Raised by a bare :class:`~jwt_clients.clients.base.JwtClient`."""


class UserDataStoreClientError(ClientError):
    """Raised by :class:`~jwt_clients.clients.user_datastore.UserDataStoreClient`."""


class SubmitterClientError(ClientError):
    """Raised by :class:`~jwt_clients.clients.submitter.SubmitterClient`."""


# error.code -> application status for connection-level failures
CONNECTION_ERROR_STATUS = {
    "ENOTFOUND": 502,  # no DNS resolution
    "ECONNREFUSED": 503,
}


def _field(obj: Any, *names: str) -> Any:
    """Read the first present field from an attribute or mapping key."""
    for name in names:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return None


def normalize_request_error(err: Any, error_class: Type[ClientError]) -> ClientError:
    """Classify ``err`` and return the matching ``error_class`` instance."""
    if isinstance(err, error_class):
        return err

    status_code = _field(err, "status_code", "statusCode")
    if status_code:
        if status_code == 404:
            # record does not exist, ie. expired
            return error_class(404)
        return error_class(status_code)

    error = _field(err, "error")
    if error is not None:
        code = _field(error, "code") or "EUNSPECIFIED"
        return error_class(CONNECTION_ERROR_STATUS.get(code, 500), code)

    return error_class(500, "ENOERROR")


__all__ = [
    "ClientError",
    "Code",
    "JwtClientError",
    "SubmitterClientError",
    "UserDataStoreClientError",
    "normalize_request_error",
]
