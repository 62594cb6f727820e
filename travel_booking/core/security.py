"""Password hashing, temporary credential generation and access tokens."""

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext

from .config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

PASSWORD_SYMBOLS = "!@#$%^&*"
PASSWORD_CHARACTER_CLASSES = (
    string.ascii_uppercase,
    string.ascii_lowercase,
    string.digits,
    PASSWORD_SYMBOLS,
)

_random = secrets.SystemRandom()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def generate_temporary_password(length: Optional[int] = None) -> str:
    """
    Generate a human-enterable password for an auto-provisioned account.

    The result always holds at least one uppercase letter, one lowercase
    letter, one digit and one symbol; the rest is drawn uniformly from all
    four classes and the whole string is shuffled.

    Args:
        length: Password length, defaults to ``settings.temp_password_length``

    Returns:
        The plaintext password. Callers must hash it before storing.

    Raises:
        ValueError: If length is too short to hold every character class
    """
    if length is None:
        length = settings.temp_password_length
    if length < len(PASSWORD_CHARACTER_CLASSES):
        raise ValueError(
            f"Password length must be at least {len(PASSWORD_CHARACTER_CLASSES)}"
        )

    alphabet = "".join(PASSWORD_CHARACTER_CLASSES)
    chars = [secrets.choice(group) for group in PASSWORD_CHARACTER_CLASSES]
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    _random.shuffle(chars)
    return "".join(chars)


def create_access_token(
    subject: str,
    role: str,
    email: str,
    name: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue an HS256 bearer token for an admin or traveler."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expires_minutes)
    )
    payload = {
        "sub": subject,
        "role": role,
        "email": email,
        "name": name,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a bearer token.

    Raises:
        jwt.PyJWTError: If the signature, expiry or format is invalid
    """
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
