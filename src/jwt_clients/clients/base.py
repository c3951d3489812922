"""
Base JWT client shared by the service clients.

:class:`JwtClient` owns the service token and turns a URL template plus a
set of keys into an authenticated request.  Each request carries a freshly
signed HS256 access token in the ``x-access-token`` header; tokens are never
cached or reused.  Failures raised by the transport are classified by
:func:`jwt_clients.errors.normalize_request_error` and re-raised as the
client's error class.

The client is parameterised rather than subclassed.  The domain clients
hold a ``JwtClient`` and pass in their own error class, and tests or
callers may swap the transport, signer or cipher functions.  Nothing is
mutated after ``__init__`` so one instance can serve concurrent calls.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Mapping, NoReturn, Optional, Type

from ..crypto import InvalidPayloadError, decrypt, encrypt, sign_token
from ..errors import ClientError, JwtClientError, normalize_request_error
from ..metrics import REQUEST_SECONDS
from ..transport import AiohttpTransport, RequestOptions, Transport
from ..url_template import resolve


logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "x-access-token"

Signer = Callable[[Optional[Dict[str, Any]], str], str]
Encrypter = Callable[[str, Any], str]
Decrypter = Callable[[str, str], Any]


def _resolve_logger(override: Optional[logging.Logger]) -> logging.Logger:
    return override if override is not None else logger


class JwtClient:
    """Sign, encrypt and send requests to a JWT-authenticated service."""

    def __init__(
        self,
        service_token: Optional[str],
        *,
        service_secret: Optional[str] = None,
        error_class: Type[ClientError] = JwtClientError,
        transport: Optional[Transport] = None,
        signer: Signer = sign_token,
        encrypter: Encrypter = encrypt,
        decrypter: Decrypter = decrypt,
        client_name: Optional[str] = None,
    ) -> None:
        """
        :param service_token: Secret used to sign access tokens.  Required.
        :param service_secret: Optional second secret.  When set it replaces
            the service token as the key for service-level encryption.
        :param error_class: Error class raised for every failure.
        :param transport: HTTP capability; defaults to :class:`AiohttpTransport`.
        :param signer: ``(claims, key) -> token``.
        :param encrypter: ``(key, data) -> ciphertext``.
        :param decrypter: ``(key, ciphertext) -> data``.
        :param client_name: Label used in logs and metrics.
        """
        self.error_class = error_class
        if not service_token:
            raise error_class("ENOSERVICETOKEN", "No service token passed to client")
        self._service_token = service_token
        self._service_secret = service_secret
        self.transport: Transport = transport if transport is not None else AiohttpTransport()
        self._signer = signer
        self._encrypter = encrypter
        self._decrypter = decrypter
        self.client_name = client_name or error_class.__name__

    @property
    def service_token(self) -> str:
        return self._service_token

    @property
    def service_secret(self) -> Optional[str]:
        return self._service_secret

    # Tokens -----------------------------------------------------------------

    def generate_access_token(self, claims: Optional[Dict[str, Any]] = None) -> str:
        """Return an HS256 access token for ``claims`` stamped with ``iat``."""
        return self._signer(claims, self._service_token)

    # Encryption -------------------------------------------------------------

    def encrypt(self, key: str, data: Any) -> str:
        """Encrypt ``data`` under a caller-supplied key (usually a user token)."""
        return self._encrypter(key, data)

    def decrypt(self, key: str, ciphertext: str) -> Any:
        """Decrypt ``ciphertext`` under ``key``.

        Raises the client's error class with code 500 and message
        ``EINVALIDPAYLOAD`` if the ciphertext cannot be decrypted.
        """
        try:
            return self._decrypter(key, ciphertext)
        except InvalidPayloadError as exc:
            raise self.error_class(500, "EINVALIDPAYLOAD") from exc

    @property
    def service_encryption_key(self) -> str:
        return self._service_secret or self._service_token

    def encrypt_for_service(self, data: Any) -> str:
        return self.encrypt(self.service_encryption_key, data)

    def decrypt_for_service(self, ciphertext: str) -> Any:
        return self.decrypt(self.service_encryption_key, ciphertext)

    # Requests ---------------------------------------------------------------

    def create_endpoint_url(self, url_pattern: str, url_keys: Optional[Mapping[str, Any]] = None) -> str:
        return resolve(url_pattern, url_keys)

    def create_request_options(
        self,
        url_pattern: str,
        url_keys: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
    ) -> RequestOptions:
        """Build the options for one request, including a new access token."""
        options: RequestOptions = {
            "url": self.create_endpoint_url(url_pattern, url_keys),
            "headers": {ACCESS_TOKEN_HEADER: self.generate_access_token()},
        }
        if payload is not None:
            options["json"] = payload
        return options

    async def send_get(
        self,
        url_pattern: str,
        url_keys: Optional[Mapping[str, Any]] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> Any:
        """GET ``url_pattern`` and return the parsed response body."""
        options = self.create_request_options(url_pattern, url_keys)
        options["json"] = True
        return await self._send("GET", self.transport.get, options, logger)

    async def send_post(
        self,
        url_pattern: str,
        url_keys: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> Any:
        """POST ``payload`` as JSON to ``url_pattern`` and return the response body."""
        options = self.create_request_options(url_pattern, url_keys, payload)
        return await self._send("POST", self.transport.post, options, logger)

    async def _send(
        self,
        method: str,
        send: Callable[[RequestOptions], Awaitable[Any]],
        options: RequestOptions,
        log: Optional[logging.Logger],
    ) -> Any:
        log = _resolve_logger(log)
        log.debug("%s %s %s", self.client_name, method, options["url"])
        started = time.perf_counter()
        try:
            body = await send(options)
        except Exception as exc:
            try:
                self.handle_request_error(exc)
            except ClientError as error:
                self._observe(method, str(error.code), started)
                log.warning(
                    "%s %s %s failed: code=%s message=%s",
                    self.client_name,
                    method,
                    options["url"],
                    error.code,
                    error.message,
                )
                raise
        self._observe(method, "ok", started)
        return body

    def handle_request_error(self, err: Any) -> NoReturn:
        """Classify ``err`` and raise it as the client's error class."""
        error = normalize_request_error(err, self.error_class)
        if error is err:
            raise error
        if isinstance(err, BaseException):
            raise error from err
        raise error

    def _observe(self, method: str, outcome: str, started: float) -> None:
        REQUEST_SECONDS.labels(client=self.client_name, method=method, outcome=outcome).observe(
            time.perf_counter() - started
        )


__all__ = ["ACCESS_TOKEN_HEADER", "JwtClient"]
