"""
Prometheus metrics for the service clients.

Two histograms are registered in the default ``prometheus_client`` registry:

* ``jwt_client_api_call_seconds{client, operation}`` – wall time of a public
  client call such as ``get_data`` or ``submit``, including decryption.
* ``jwt_client_request_seconds{client, method, outcome}`` – wall time of a
  single outbound HTTP request.  ``outcome`` is ``"ok"`` or the normalised
  error code.

The library does not start a metrics HTTP server; the host application
exposes the default registry the way it already does.
"""

from __future__ import annotations

from prometheus_client import Histogram


API_CALL_SECONDS = Histogram(
    "jwt_client_api_call_seconds",
    "Duration of service client API calls",
    labelnames=["client", "operation"],
)

REQUEST_SECONDS = Histogram(
    "jwt_client_request_seconds",
    "Duration of outbound service client HTTP requests",
    labelnames=["client", "method", "outcome"],
)


__all__ = ["API_CALL_SECONDS", "REQUEST_SECONDS"]
