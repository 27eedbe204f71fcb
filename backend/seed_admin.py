"""
Seed the first administrator

Accounts can only be created by administrators/managers, so a fresh
database needs one account created out of band.

Run with:
    python seed_admin.py admin@axionpowert.com.br "Admin" <password>
or, after install:
    drawhub-seed-admin admin@axionpowert.com.br "Admin" <password>
"""
import asyncio
import sys

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from drawhub.core.database import get_session_local, init_db, close_db
from drawhub.core.security import get_password_hash
from drawhub.models.user import User, UserRole


async def seed_admin(db: AsyncSession, email: str, name: str, password: str) -> User:
    """Create the administrator, or return the existing account with that e-mail"""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    existing = result.scalar_one_or_none()
    if existing:
        print(f"  Exists: {existing.email} ({existing.role.value})")
        return existing

    user = User(
        name=name,
        email=email.lower(),
        hashed_password=get_password_hash(password),
        role=UserRole.ADMINISTRADOR,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    print(f"  Created: {user.email} ({user.role.value})")
    return user


async def _run(email: str, name: str, password: str):
    await init_db()
    async with get_session_local()() as db:
        await seed_admin(db, email, name, password)
    await close_db()


def main():
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)
    asyncio.run(_run(*sys.argv[1:4]))


if __name__ == "__main__":
    main()
