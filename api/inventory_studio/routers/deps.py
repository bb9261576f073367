# inventory_studio/routers/deps.py
from __future__ import annotations
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_studio.database import get_session
from inventory_studio.services.principals import Principal, resolve_principal


async def get_principal(
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_session),
) -> Principal:
    """Identity forwarded by the authenticating gateway; required for writes."""
    return await resolve_principal(db, x_user_email, x_user_name)
