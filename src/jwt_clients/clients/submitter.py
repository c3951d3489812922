"""
Submitter client.

Submissions hand the submitter a bundle of the user's ID and token encrypted
under the *service* token.  The submitter never sees the raw user token; it
only returns the bundle to this service when it needs user data.  Status
responses are not user data and are returned exactly as received.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from ..errors import SubmitterClientError
from ..metrics import API_CALL_SECONDS
from ..transport import Transport
from .base import JwtClient


ENDPOINTS = {
    "submit": "/submission",
    "get_status": "/submission/:submission_id",
}

CLIENT_NAME = "submitter"


class SubmitterClient:
    """Submit user data and poll submission status."""

    ErrorClass = SubmitterClientError

    def __init__(
        self,
        service_token: Optional[str],
        submitter_url: Optional[str],
        service_slug: Optional[str],
        *,
        transport: Optional[Transport] = None,
    ) -> None:
        self.jwt_client = JwtClient(
            service_token,
            error_class=self.ErrorClass,
            transport=transport,
            client_name=CLIENT_NAME,
        )
        if not submitter_url:
            raise self.ErrorClass("ENOSUBMITTERURL", "No submitter url passed to client")
        if not service_slug:
            raise self.ErrorClass("ENOSERVICESLUG", "No service slug passed to client")
        self._service_slug = service_slug
        self.endpoints: Mapping[str, str] = MappingProxyType(
            {name: submitter_url + path for name, path in ENDPOINTS.items()}
        )

    @property
    def service_slug(self) -> str:
        return self._service_slug

    @property
    def service_token(self) -> str:
        return self.jwt_client.service_token

    def encrypt_user_id_and_token(self, user_id: str, user_token: str) -> str:
        """Encrypt the user's ID and token under the service token."""
        return self.jwt_client.encrypt_for_service({"userId": user_id, "userToken": user_token})

    def decrypt_user_id_and_token(self, encrypted_data: str) -> Dict[str, Any]:
        """Reverse :meth:`encrypt_user_id_and_token`."""
        return self.jwt_client.decrypt_for_service(encrypted_data)

    async def get_status(
        self,
        submission_id: str,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> Any:
        """Return the submitter's status record for ``submission_id``."""
        with API_CALL_SECONDS.labels(client=CLIENT_NAME, operation="get_status").time():
            return await self.jwt_client.send_get(
                self.endpoints["get_status"], {"submission_id": submission_id}, logger=logger
            )

    async def submit(
        self,
        user_id: str,
        user_token: str,
        submissions: List[Any],
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Send submission instructions for a user.

        :param user_id: User ID.
        :param user_token: User token.
        :param submissions: Output instructions (emails, webhooks, ...).
        """
        with API_CALL_SECONDS.labels(client=CLIENT_NAME, operation="submit").time():
            instructions = {
                "service_slug": self._service_slug,
                "encrypted_user_id_and_token": self.encrypt_user_id_and_token(user_id, user_token),
                "submissions": submissions,
            }
            await self.jwt_client.send_post(self.endpoints["submit"], None, instructions, logger=logger)


__all__ = ["ENDPOINTS", "SubmitterClient"]
