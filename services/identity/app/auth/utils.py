from datetime import datetime, timezone

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """False on mismatch and on a stored hash passlib cannot parse."""
    try:
        return context.verify(plain, hashed)
    except (UnknownHashError, ValueError, TypeError):
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def mask_email(email: str) -> str:
    """``sunita@gmail.com`` -> ``s***@gmail.com`` for log lines."""
    local, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
