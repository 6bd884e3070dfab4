import os
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

# Get and validate settings from environment
_secret_key = os.getenv("SECRET_KEY")
_algorithm = os.getenv("ALGORITHM")

if not _secret_key:
    raise ValueError("SECRET_KEY must be set in .env file")
if not _algorithm:
    raise ValueError("ALGORITHM must be set in .env file")

SECRET_KEY: str = _secret_key
ALGORITHM: str = _algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))


# Configure bcrypt for password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plain password with bcrypt; the result is what gets stored."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(username: str) -> str:
    """
    Create a signed JWT for username.
    Roles are not embedded: they are read from the database on every
    request so a demoted admin loses access immediately.
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": username, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_access_token(token: str) -> dict | None:
    """
    Verify and decode a JWT access token.
    Returns the payload, or None if the token is invalid or expired.
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
