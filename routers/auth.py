from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
import logging

from core.exceptions import UnauthenticatedError
from core.security import create_access_token, decode_access_token
from database import get_db
from models import User
from schemas.user import GoogleLoginRequest, MeResponse, TokenResponse
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


class OAuth2PasswordBearerWithCookie(OAuth2PasswordBearer):
    """
    Reads the token from the ``Authorization`` header or, failing that, the token cookie.

    The header may carry ``Bearer <token>`` or the bare token.
    """

    async def __call__(self, request: Request) -> Optional[str]:
        authorization = request.headers.get("Authorization", "").strip()
        if authorization:
            scheme, _, param = authorization.partition(" ")
            if not param:
                return scheme
            if scheme.lower() == "bearer":
                return param.strip()

        cookie_name = request.app.state.settings.TOKEN_COOKIE_NAME
        token = request.cookies.get(cookie_name)
        if token:
            return token[len("Bearer "):] if token.startswith("Bearer ") else token
        return None


oauth2_scheme = OAuth2PasswordBearerWithCookie(tokenUrl="/auth/google-login", auto_error=False)


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the current authenticated user from the JWT token.

    Raises:
        UnauthenticatedError: If the token is missing, invalid, expired or
            names a user that no longer exists
    """
    if not token:
        raise UnauthenticatedError()

    settings = request.app.state.settings
    user_id = decode_access_token(token, settings.SECRET_KEY, settings.ALGORITHM)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthenticatedError("Could not validate credentials")
    return user


async def get_optional_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get the current user if authenticated, otherwise return None.

    An invalid or expired token is treated the same as no token.
    """
    if not token:
        return None

    try:
        return await get_current_user(request, token, db)
    except UnauthenticatedError as e:
        logger.debug(f"Ignoring unusable credential: {e.message}")
        return None


@router.post("/google-login", response_model=TokenResponse, summary="Sign in with an external identity")
async def google_login(
    login_data: GoogleLoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Exchange an identity asserted by the external provider for an access token.

    The user is created on first sign-in. The token is returned in the body
    and set as an HTTP-only cookie.
    """
    try:
        settings = request.app.state.settings
        user = await UserService(db).get_or_create_by_email(login_data.username, login_data.email)

        expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        token = create_access_token(
            user.id,
            settings.SECRET_KEY,
            settings.ALGORITHM,
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        response.set_cookie(
            key=settings.TOKEN_COOKIE_NAME,
            value=token,
            httponly=True,
            samesite="lax",
            max_age=expires_in,
        )
        return TokenResponse(access_token=token, expires_in=expires_in)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error signing in {login_data.email}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while signing in"
        )


@router.get("/me", response_model=MeResponse, summary="The signed-in user and their channels")
async def me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return {"user": await UserService(db).get_profile(current_user)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error loading profile of user {current_user.id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while loading the profile"
        )


@router.get("/signout", summary="Clear the token cookie")
async def signout(request: Request, response: Response):
    response.delete_cookie(request.app.state.settings.TOKEN_COOKIE_NAME)
    return {}
