"""Credential storage, resolution and lifecycle.

- :mod:`.token_store` reads and writes the credential files
- :mod:`.resolver` picks the token to use for a request
- :mod:`.lifecycle` validates, exchanges and refreshes tokens
"""

from .lifecycle import SetTokenResult, TokenLifecycleManager, require_app_credentials
from .resolver import (
    NOT_AUTHENTICATED_MESSAGE,
    CredentialResolver,
    ResolvedCredential,
    TokenSource,
)
from .token_store import (
    CredentialStore,
    create_local_store,
    create_shared_store,
    default_config_dir,
    local_store_path,
    shared_store_path,
)

__all__ = [
    "CredentialResolver",
    "CredentialStore",
    "NOT_AUTHENTICATED_MESSAGE",
    "ResolvedCredential",
    "SetTokenResult",
    "TokenLifecycleManager",
    "TokenSource",
    "create_local_store",
    "create_shared_store",
    "default_config_dir",
    "local_store_path",
    "require_app_credentials",
    "shared_store_path",
]
