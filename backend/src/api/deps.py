"""FastAPI dependencies for authentication and uploader identity."""
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.identity import Uploader, resolve_uploader
from src.core.request_context import set_actor_id
from src.core.security import decode_token
from src.models.user import User

# Bearer scheme that leaves missing credentials to the dependency
security = HTTPBearer(auto_error=False)


async def _user_from_token(token: str, db: AsyncSession) -> User:
    payload = decode_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
        )

    subject = payload.get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, user not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, user account is deactivated",
        )

    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from the bearer JWT.

    Raises:
        HTTPException: 401 if the token is missing, invalid, or the user
            does not exist or is deactivated
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
        )
    user = await _user_from_token(credentials.credentials, db)
    set_actor_id(str(user.id))
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like get_current_user, but a request without a token yields None.

    A token that is present and invalid is still rejected.
    """
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, db)


async def get_uploader(
    current_user: User | None = Depends(get_optional_user),
) -> Uploader:
    """Identity uploads are recorded against, synthetic when anonymous."""
    return resolve_uploader(current_user.id if current_user else None)
