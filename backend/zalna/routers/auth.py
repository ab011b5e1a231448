from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.database import get_db
from zalna.dependencies import get_current_user
from zalna.models.user import User
from zalna.schemas.auth import EmailLoginRequest, LoginResponse, SessionResponse, UserResponse
from zalna.services.supabase_client import IdentityProviderError, supabase_client
from zalna.services.user_service import user_service

router = APIRouter()


@router.post("/login/email", response_model=LoginResponse)
async def login_with_email(req: EmailLoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        session = await supabase_client.sign_in_with_password(req.email, req.password)
    except IdentityProviderError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    user = await user_service.sync_user(db, session.user, avatar_url=req.avatar_url)
    return LoginResponse(
        session=SessionResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_in=session.expires_in,
            expires_at=session.expires_at,
            token_type=session.token_type,
        ),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
