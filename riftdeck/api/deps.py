"""
Shared request dependencies.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from riftdeck.config import settings
from riftdeck.db.database import get_session


def current_user_id(request: Request) -> str:
    """
    Caller identity, taken from the header set by the authenticating proxy.

    Returns 401 if the header is missing or blank.
    """
    user_id = request.headers.get(settings.user_id_header, "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return user_id


SessionDep = Annotated[AsyncSession, Depends(get_session)]
UserIdDep = Annotated[str, Depends(current_user_id)]
