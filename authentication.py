from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerifyMismatchError
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from config import settings
from exceptions import AuthenticationException


class AuthHandler:
    # missing credentials are reported as 401 by auth_wrapper, not 403 by the scheme
    security = HTTPBearer(auto_error=False)
    # Accounts created before the argon2 switch carry bcrypt hashes
    pwd_content_legacy = CryptContext(schemes=["bcrypt"], deprecated="auto")
    argon2_hasher = PasswordHasher()
    secret = settings.SECRET_KEY
    refresh_secret = settings.SECRET_KEY + "_refresh"

    def get_password_hash(self, password):
        """Hash password using argon2"""
        return self.argon2_hasher.hash(password)

    def verify_password(self, plain_password, hashed_password):
        """Verify password - supports both argon2 and legacy bcrypt"""
        if not hashed_password:
            return False
        if hashed_password.startswith("$argon2"):
            try:
                return self.argon2_hasher.verify(hashed_password, plain_password)
            except (VerifyMismatchError, InvalidHash):
                return False

        try:
            return self.pwd_content_legacy.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, hashed_password):
        """Check if password needs to be upgraded from bcrypt to argon2"""
        return not hashed_password.startswith("$argon2")

    def encode_token(self, user):
        """Generate short-lived access token"""
        now = datetime.now(timezone.utc)
        payload = {
            "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MIN),
            "iat": now,
            "sub": user["_id"],
            "role": user["role"],
            "name": user.get("name"),
            "email": user.get("email"),
            "type": "access",
        }
        return jwt.encode(payload, self.secret, algorithm="HS256")

    def encode_refresh_token(self, user):
        """Generate long-lived refresh token"""
        now = datetime.now(timezone.utc)
        payload = {
            "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            "iat": now,
            "sub": user["_id"],
            "type": "refresh",
        }
        return jwt.encode(payload, self.refresh_secret, algorithm="HS256")

    def decode_token(self, token):
        """Decode and validate access token"""
        try:
            payload = jwt.decode(token, self.secret, algorithms=["HS256"])
            if payload.get("type") != "access":
                raise jwt.InvalidTokenError("Not an access token")
            return TokenPayload(
                sub=payload["sub"],
                role=payload["role"],
                name=payload.get("name"),
                email=payload.get("email"),
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationException(
                message="Token has expired", details={"reason": "expired_signature"}
            ) from e
        except (jwt.InvalidTokenError, KeyError) as e:
            raise AuthenticationException(
                message="Invalid token", details={"reason": "invalid_token"}
            ) from e

    def decode_refresh_token(self, token):
        """Decode and validate refresh token, returns the user id"""
        try:
            payload = jwt.decode(token, self.refresh_secret, algorithms=["HS256"])
            if payload.get("type") != "refresh":
                raise jwt.InvalidTokenError("Not a refresh token")
            return payload["sub"]
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationException(
                message="Refresh token has expired", details={"reason": "expired_refresh_token"}
            ) from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationException(
                message="Invalid refresh token", details={"reason": "invalid_refresh_token"}
            ) from e

    def auth_wrapper(self, auth: HTTPAuthorizationCredentials | None = Security(security)):
        if auth is None or not auth.credentials:
            raise AuthenticationException(details={"reason": "missing_credentials"})
        return self.decode_token(auth.credentials)


class TokenPayload:

    def __init__(
        self,
        sub: str,
        role: str,
        name: str | None = None,
        email: str | None = None,
    ):
        self.sub = sub
        self.role = role
        self.name = name
        self.email = email
