"""
Authenticated clients for the user datastore and submitter services.

Every request is signed with an HS256 access token derived from the
service token.  User payloads are AES-256 encrypted under the user's own
token before they are sent.
"""

from .clients import JwtClient, SubmitterClient, UserDataStoreClient  # noqa: F401
from .config import (  # noqa: F401
    SubmitterConfig,
    UserDataStoreConfig,
    create_submitter_client,
    create_user_datastore_client,
)
from .errors import (  # noqa: F401
    ClientError,
    JwtClientError,
    SubmitterClientError,
    UserDataStoreClientError,
)
from .transport import AiohttpTransport, Transport, TransportError  # noqa: F401

__version__ = "1.0.0"
