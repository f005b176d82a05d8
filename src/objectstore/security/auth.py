"""Bearer token check for mutating endpoints."""

import secrets
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.objectstore.configs.config import get_config
from src.objectstore.errors import Unauthorized

bearer_scheme = HTTPBearer(auto_error=False)


def require_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """FastAPI dependency rejecting requests without the configured bearer token."""
    if credentials is None:
        raise Unauthorized()
    expected = get_config().auth_token
    if not secrets.compare_digest(credentials.credentials.encode(), expected.encode()):
        raise Unauthorized()
