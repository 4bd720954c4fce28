from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError

from core.exceptions import UnauthenticatedError


def create_access_token(
    user_id: int,
    secret_key: str,
    algorithm: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token identifying ``user_id``"""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=15)
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str) -> int:
    """
    Return the user id carried by ``token``.

    Raises:
        UnauthenticatedError: If the token is malformed, expired or has no subject
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token has expired")
    except JWTError:
        raise UnauthenticatedError("Invalid authentication token")

    subject = payload.get("sub")
    if subject is None:
        raise UnauthenticatedError("Invalid authentication token")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise UnauthenticatedError("Invalid authentication token")
