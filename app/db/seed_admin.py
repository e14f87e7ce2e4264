"""
Seed script to create the first admin account.

Run once (after schema_check) with env set:
  ADMIN_EMAIL=admin@example.org
  ADMIN_PASSWORD=YourSecurePassword

Creates the account (user, profile, approval flag) if the e-mail is new; otherwise resets
its password. Either way the profile gets is_admin = true.
"""
import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import hash_password
from app.core.config import settings
from app.core.enums import ApprovalStatus
from app.core.models import AdminFlag, Profile
from app.db.session import AsyncSessionLocal

DEFAULT_ADMIN_FULL_NAME = "Directory Admin"


async def seed_admin(db: AsyncSession, email: str, password: str, full_name: str = DEFAULT_ADMIN_FULL_NAME) -> User:
    email = email.strip().lower()
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(email=email, password_hash=hash_password(password))
        db.add(user)
        await db.flush()
        print("Created admin user:", email)
    else:
        user.password_hash = hash_password(password)
        print("Updated existing user to admin:", email)

    profile = await db.get(Profile, user.id)
    if profile is None:
        db.add(Profile(id=user.id, full_name=full_name, is_admin=True))
    else:
        profile.is_admin = True
        profile.full_name = profile.full_name or full_name

    if await db.get(AdminFlag, user.id) is None:
        db.add(AdminFlag(user_id=user.id, status=ApprovalStatus.PENDING.value))

    await db.commit()
    print("Admin seed done.")
    return user


async def main() -> None:
    if not settings.admin_email or not settings.admin_password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set; nothing to do.")
        return
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db, settings.admin_email, settings.admin_password)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
