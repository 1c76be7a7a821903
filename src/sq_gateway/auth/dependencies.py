"""FastAPI dependency: get_claimant.

Usage in any protected router:
    from src.sq_gateway.auth.dependencies import get_claimant

    @router.post("/protected")
    async def protected(claimant: Claimant = Depends(get_claimant)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.sq_board.domain.models import Claimant
from src.sq_common.errors import InvalidCredentialsError
from src.sq_gateway.auth.jwt_handler import decode_token

# Tokens come from the identity service; tokenUrl only feeds Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_claimant(token: str = Depends(oauth2_scheme)) -> Claimant:
    """Extract the claimant from the Bearer token.

    Raises HTTP 401 if the token is invalid or expired, or lacks a user id
    or display name.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = (payload.get("sub") or "").strip()
    display_name = (payload.get("name") or "").strip()
    if not user_id or not display_name:
        raise _CREDENTIALS_EXCEPTION
    return Claimant(user_id=user_id, display_name=display_name)
