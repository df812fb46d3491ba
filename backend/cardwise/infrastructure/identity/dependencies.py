"""FastAPI dependencies for identity and authentication."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cardwise.exceptions import CredentialsException
from cardwise.infrastructure.identity.token_service import verify_access_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> int:
    """
    Get the current user's id from the bearer token.

    Raises:
        CredentialsException: If the token is missing or invalid
    """
    if credentials is None:
        raise CredentialsException

    user_id = verify_access_token(credentials.credentials)
    if user_id is None:
        raise CredentialsException
    return user_id


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
