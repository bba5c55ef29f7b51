from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from resort.core.config import settings

# pbkdf2 has no 72-byte input cap and no native backend to install
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGORITHM = "HS256"
TOKEN_TYPE = "admin_access"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(admin_id: str, role: str | None = None, expires_minutes: int | None = None) -> str:
    """Signed admin session token. ``role`` is informational; guards re-read it from the database."""
    minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    claims = {
        "sub": admin_id,
        "type": TOKEN_TYPE,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    if role:
        claims["role"] = role
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature and expiry. Raises ExpiredSignatureError or JWTError."""
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    if claims.get("type") != TOKEN_TYPE:
        raise JWTError("not an admin access token")
    return claims
