"""
User datastore client.

The user datastore keeps one payload per user per service.  Payloads are
encrypted with the user's own token before they leave this process, so the
datastore only ever relays ciphertext it cannot read.  A ``404`` from
``get_data`` means the user has no stored data or it has expired.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..errors import UserDataStoreClientError
from ..metrics import API_CALL_SECONDS
from ..transport import Transport
from .base import JwtClient


ENDPOINT_URL_TEMPLATE = "/service/:service_slug/user/:user_id"
ENDPOINTS = {
    "get": ENDPOINT_URL_TEMPLATE,
    "set": ENDPOINT_URL_TEMPLATE,
}

CLIENT_NAME = "user_datastore"


class UserDataStoreClient:
    """Fetch and store encrypted user data."""

    ErrorClass = UserDataStoreClientError

    def __init__(
        self,
        service_secret: Optional[str],
        service_token: Optional[str],
        service_slug: Optional[str],
        user_datastore_url: Optional[str],
        *,
        transport: Optional[Transport] = None,
    ) -> None:
        """Arguments are validated in order; the first missing one raises
        :class:`UserDataStoreClientError` with its own code.
        """
        if not service_secret:
            raise self.ErrorClass("ENOSERVICESECRET", "No service secret passed to client")
        self.jwt_client = JwtClient(
            service_token,
            service_secret=service_secret,
            error_class=self.ErrorClass,
            transport=transport,
            client_name=CLIENT_NAME,
        )
        if not service_slug:
            raise self.ErrorClass("ENOSERVICESLUG", "No service slug passed to client")
        if not user_datastore_url:
            raise self.ErrorClass("ENOMICROSERVICEURL", "No microservice url passed to client")
        self._service_slug = service_slug
        self.endpoints: Mapping[str, str] = MappingProxyType(
            {name: user_datastore_url + path for name, path in ENDPOINTS.items()}
        )

    @property
    def service_slug(self) -> str:
        return self._service_slug

    @property
    def service_token(self) -> str:
        return self.jwt_client.service_token

    @property
    def service_secret(self) -> Optional[str]:
        return self.jwt_client.service_secret

    def encrypt(self, user_token: str, payload: Any) -> str:
        return self.jwt_client.encrypt(user_token, payload)

    def decrypt(self, user_token: str, encrypted_payload: str) -> Any:
        return self.jwt_client.decrypt(user_token, encrypted_payload)

    async def get_data(
        self,
        user_id: str,
        user_token: str,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> Any:
        """Fetch the user's data and return it decrypted.

        :param user_id: User ID.
        :param user_token: User token; the key the data is encrypted under.
        :param logger: Optional request-scoped logger.
        """
        with API_CALL_SECONDS.labels(client=CLIENT_NAME, operation="get_data").time():
            url_keys = {"service_slug": self._service_slug, "user_id": user_id}
            body = await self.jwt_client.send_get(self.endpoints["get"], url_keys, logger=logger)
            encrypted_payload = body.get("payload") if isinstance(body, Mapping) else None
            return self.decrypt(user_token, encrypted_payload)

    async def set_data(
        self,
        user_id: str,
        user_token: str,
        payload: Any,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Encrypt ``payload`` with the user's token and store it."""
        with API_CALL_SECONDS.labels(client=CLIENT_NAME, operation="set_data").time():
            url_keys = {"service_slug": self._service_slug, "user_id": user_id}
            encrypted_payload = self.encrypt(user_token, payload)
            await self.jwt_client.send_post(
                self.endpoints["set"], url_keys, {"payload": encrypted_payload}, logger=logger
            )


__all__ = ["ENDPOINTS", "UserDataStoreClient"]
