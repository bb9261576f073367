# inventory_studio/services/principals.py
"""
Authenticated principal resolution.

Authentication itself happens upstream; the gateway forwards the caller's
e-mail (and optionally display name). The principal is passed explicitly to
every mutating service call.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_studio.database import transaction
from inventory_studio.db_models import User
from inventory_studio.errors import PrincipalRequired


@dataclass(frozen=True)
class Principal:
    id: int
    email: str
    display_name: str


async def _find_user(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def resolve_principal(db: AsyncSession, email: Optional[str], name: Optional[str] = None) -> Principal:
    """Get-or-create the user behind a forwarded identity."""
    email = (email or "").strip().lower()
    if not email:
        raise PrincipalRequired("Authenticated user identity is required")

    user = await _find_user(db, email)
    if user is None:
        try:
            async with transaction(db):
                user = User(email=email, name=(name or "").strip() or None)
                db.add(user)
                await db.flush()
        except IntegrityError:
            # concurrent first request for the same e-mail
            user = await _find_user(db, email)
            if user is None:
                raise

    return Principal(id=user.id, email=user.email, display_name=user.display_name)
