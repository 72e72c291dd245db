import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from planner.models.user import User
from planner.schemas.user import UserOut, ProfileUpdate
from planner.core.security import hash_password, verify_password, generate_temp_password
from planner.core.email import Mailer
from planner.services.user_queries import get_user_by_email, get_user_by_username

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    full_name: str | None = None,
):
    """
    Persist a new user with a bcrypt hash of ``password``.

    Email uniqueness is enforced by the database; the IntegrityError is left to
    the caller, which is expected to check ``get_user_by_email`` first.
    """
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        full_name=full_name or None,
    )

    db.add(user)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    await db.refresh(user)
    logger.info("User created id=%s", user.id)
    return user

async def authenticate_user(db: AsyncSession, email: str, password: str):
    """
    Return the public view of the user, or None.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    user = await get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return UserOut.model_validate(user)

async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate):
    if data.username is not None and data.username != user.username:
        if len(data.username) < MIN_USERNAME_LENGTH:
            raise ValueError("Username must be at least 3 characters")
        existing = await get_user_by_username(db, data.username)
        if existing and existing.id != user.id:
            raise ValueError("Username is already taken")
        user.username = data.username

    if data.full_name is not None:
        user.full_name = data.full_name or None

    if data.current_password and data.new_password:
        if not verify_password(data.current_password, user.password_hash):
            raise ValueError("Current password is incorrect")
        if len(data.new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError("New password must be at least 6 characters")
        user.password_hash = hash_password(data.new_password)

    await db.commit()
    await db.refresh(user)
    return user

async def reset_password(db: AsyncSession, mailer: Mailer, email: str) -> bool:
    """
    Replace the password of ``email`` with a random temporary one and mail it.

    An unknown address reports success without sending anything, so callers
    cannot probe which addresses are registered.
    """
    user = await get_user_by_email(db, email)
    if not user:
        logger.info("Password reset requested for unknown email")
        return True

    temp_password = generate_temp_password()
    user.password_hash = hash_password(temp_password)
    await db.commit()

    sent = await mailer.send_password_reset_email(email, temp_password)
    if not sent:
        logger.warning("Password reset email could not be delivered user_id=%s", user.id)
    else:
        logger.info("Password reset for user_id=%s", user.id)
    return sent
