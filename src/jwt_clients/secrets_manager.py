"""
secrets_manager
===============

Loads client secrets from environment variables, or from files named by a
matching ``*_FILE`` variable.  Mounting secrets as files (Kubernetes or
Docker secrets) keeps them out of the process environment.

Example usage::

    from jwt_clients.secrets_manager import EnvFileSecretsManager

    secrets = EnvFileSecretsManager()
    service_token = secrets.get_secret("SERVICE_TOKEN")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional


logger = logging.getLogger(__name__)


class BaseSecretsManager:
    """Abstract base class for secrets managers."""

    def get_secret(self, name: str) -> Optional[str]:  # pragma: no cover - override
        """Return the secret value for ``name`` or ``None`` if unavailable."""
        raise NotImplementedError


class EnvFileSecretsManager(BaseSecretsManager):
    """Reads a setting such as ``SERVICE_TOKEN`` from the environment.

    A mounted ``SERVICE_TOKEN_FILE`` wins over the plain variable; relative
    file paths are taken from ``base_path``.  Answers are cached per manager
    and an unreadable file gives ``None``.
    """

    def __init__(self, base_path: Optional[Path] = None) -> None:
        self.base_path = base_path
        self._cache: Dict[str, Optional[str]] = {}

    def get_secret(self, name: str) -> Optional[str]:
        if name in self._cache:
            return self._cache[name]

        file_path = os.getenv(f"{name}_FILE")
        if file_path:
            path = Path(file_path)
            if not path.is_absolute() and self.base_path is not None:
                path = self.base_path / path
            try:
                value: Optional[str] = path.read_text(encoding="utf-8").strip()
            except OSError as exc:
                logger.warning("Failed to read secret file for %s: %s", name, exc)
                value = None
        else:
            value = os.getenv(name)

        self._cache[name] = value
        return value


def get_default_secrets_manager() -> BaseSecretsManager:
    """Return an :class:`EnvFileSecretsManager` rooted at ``SECRETS_BASE_PATH``."""
    base_path = os.getenv("SECRETS_BASE_PATH")
    return EnvFileSecretsManager(base_path=Path(base_path) if base_path else None)


__all__ = [
    "BaseSecretsManager",
    "EnvFileSecretsManager",
    "get_default_secrets_manager",
]
