"""
Client configuration.

Each client has a frozen configuration dataclass and a factory function
that builds the client from it.  Configuration is read once, usually from
the environment via :meth:`from_env`, and passed in explicitly; no client
state lives at module level.

Environment variables:

* ``SERVICE_SECRET`` – user datastore service secret.
* ``SERVICE_TOKEN`` – signing secret for access tokens.
* ``SERVICE_SLUG`` – the calling service's slug.
* ``USER_DATASTORE_URL`` – base URL of the user datastore.
* ``SUBMITTER_URL`` – base URL of the submitter.

Any of them may instead be supplied as a file path in ``{NAME}_FILE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clients.submitter import SubmitterClient
from .clients.user_datastore import UserDataStoreClient
from .secrets_manager import BaseSecretsManager, get_default_secrets_manager
from .transport import Transport


@dataclass(frozen=True)
class UserDataStoreConfig:
    service_secret: Optional[str]
    service_token: Optional[str]
    service_slug: Optional[str]
    user_datastore_url: Optional[str]

    @classmethod
    def from_env(cls, secrets: Optional[BaseSecretsManager] = None) -> "UserDataStoreConfig":
        secrets = secrets or get_default_secrets_manager()
        return cls(
            service_secret=secrets.get_secret("SERVICE_SECRET"),
            service_token=secrets.get_secret("SERVICE_TOKEN"),
            service_slug=secrets.get_secret("SERVICE_SLUG"),
            user_datastore_url=secrets.get_secret("USER_DATASTORE_URL"),
        )


@dataclass(frozen=True)
class SubmitterConfig:
    service_token: Optional[str]
    submitter_url: Optional[str]
    service_slug: Optional[str]

    @classmethod
    def from_env(cls, secrets: Optional[BaseSecretsManager] = None) -> "SubmitterConfig":
        secrets = secrets or get_default_secrets_manager()
        return cls(
            service_token=secrets.get_secret("SERVICE_TOKEN"),
            submitter_url=secrets.get_secret("SUBMITTER_URL"),
            service_slug=secrets.get_secret("SERVICE_SLUG"),
        )


def create_user_datastore_client(
    config: UserDataStoreConfig, transport: Optional[Transport] = None
) -> UserDataStoreClient:
    return UserDataStoreClient(
        config.service_secret,
        config.service_token,
        config.service_slug,
        config.user_datastore_url,
        transport=transport,
    )


def create_submitter_client(config: SubmitterConfig, transport: Optional[Transport] = None) -> SubmitterClient:
    return SubmitterClient(
        config.service_token,
        config.submitter_url,
        config.service_slug,
        transport=transport,
    )


__all__ = [
    "SubmitterConfig",
    "UserDataStoreConfig",
    "create_submitter_client",
    "create_user_datastore_client",
]
