"""
Clients for the JWT-authenticated microservices.

``JwtClient`` is the shared request/signing core.  ``UserDataStoreClient``
and ``SubmitterClient`` each wrap one and add their own endpoints and error
class.
"""

from .base import JwtClient  # noqa: F401
from .submitter import SubmitterClient  # noqa: F401
from .user_datastore import UserDataStoreClient  # noqa: F401
