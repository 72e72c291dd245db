from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user, get_mailer
from planner.core.email import Mailer
from planner.core.jwt_config import set_session_cookie, clear_session_cookie
from planner.schemas.common import ok
from planner.schemas.user import UserCreate, UserLogin, UserOut, PasswordResetRequest
from planner.services.user_queries import get_user_by_email
from planner.services.user_service import create_user, authenticate_user, reset_password

router = APIRouter()


@router.post("/register", status_code=201)
async def register(data: UserCreate, db: AsyncSession = Depends(get_db)):
    if await get_user_by_email(db, data.email):
        raise HTTPException(409, "This email address is already registered")

    user = await create_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        full_name=data.full_name,
    )
    return ok(UserOut.model_validate(user), "Registration successful")


@router.post("/login")
async def login(data: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.email, data.password)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    set_session_cookie(response, user.id)
    return ok(user, "Login successful")


@router.post("/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return ok(message="Logged out")


@router.get("/me")
async def me(user=Depends(get_current_user)):
    return ok(UserOut.model_validate(user))


@router.post("/reset-password")
async def request_password_reset(
    data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    sent = await reset_password(db, mailer, data.email)

    if not sent:
        raise HTTPException(500, "The password reset email could not be sent")

    return ok(message="Password reset instructions have been sent to your email address")
