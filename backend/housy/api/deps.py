from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from housy.core.db import get_session
from housy.core.security import decode_access_token
from housy.services.access import load_actor
from housy.services.types import Actor

# Missing or invalid tokens resolve to no actor; services raise Unauthenticated.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


async def get_actor(
    session: AsyncSession = Depends(get_session),
    token: str | None = Depends(oauth2_scheme),
) -> Actor | None:
    if not token:
        return None
    try:
        user_id = decode_access_token(token)
    except (ValueError, TypeError):
        return None
    return await load_actor(session, user_id=user_id)
