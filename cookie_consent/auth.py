from dataclasses import dataclass
from jose import JWTError, jwt, ExpiredSignatureError
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional
from cookie_consent.constants.user_types import UserType, is_authenticated_type
from cookie_consent.models.user import User
from cookie_consent.database import get_db
from .constants.auth import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_COOKIE
import logging

# Initialize logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    """Who is calling: the account ID (if any) and its identity type."""

    user_id: Optional[int] = None
    user_type: UserType = UserType.GUEST

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None and is_authenticated_type(self.user_type)

    @classmethod
    def guest(cls) -> "CallerContext":
        return cls()

    @classmethod
    def for_user(cls, user: User) -> "CallerContext":
        return cls(user_id=user.id, user_type=UserType(user.user_type))


# Decode an access token and return its subject, or None if unusable
def decode_access_token(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Access token expired, treating caller as guest")
        return None
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        return None

    email = payload.get("sub")
    if email is None:
        logger.warning("Token is missing 'sub' claim")
    return email


def _extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def get_caller_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CallerContext:
    """
    Build the caller context for the current request.

    Anonymous visitors are the main audience of the consent banner, so a
    missing or invalid token yields a guest context instead of a 401.
    """
    caller = CallerContext.guest()

    token = _extract_token(request)
    if token:
        email = decode_access_token(token)
        if email:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalars().first()
            if user is None:
                logger.warning(f"Token subject '{email}' has no account, treating caller as guest")
            else:
                caller = CallerContext.for_user(user)

    request.state.caller = caller
    return caller
