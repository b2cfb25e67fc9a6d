import re
from functools import lru_cache
from typing import Optional
from passlib.context import CryptContext
from cryptolend.core.config import Settings, get_settings

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100


@lru_cache()
def _build_context(schemes: tuple) -> CryptContext:
    return CryptContext(schemes=list(schemes), deprecated="auto")


def get_pwd_context(settings: Optional[Settings] = None) -> CryptContext:
    """Password hashing context for the configured schemes"""
    settings = settings or get_settings()
    return _build_context(tuple(settings.password_hash_schemes_list))


def verify_password(plain_password: str, hashed_password: str, settings: Optional[Settings] = None) -> bool:
    """Verify a password against its hash"""
    return get_pwd_context(settings).verify(plain_password, hashed_password)


def get_password_hash(password: str, settings: Optional[Settings] = None) -> str:
    """Hash a password"""
    return get_pwd_context(settings).hash(password)


def validate_password_strength(password: str) -> tuple[bool, str]:
    """
    Validate password strength
    Returns: (is_valid, error_message)
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        return False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    
    if len(password) > PASSWORD_MAX_LENGTH:
        return False, f"Password must be at most {PASSWORD_MAX_LENGTH} characters long"
    
    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"
    
    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"
    
    if not re.search(r"[0-9]", password):
        return False, "Password must contain at least one digit"
    
    return True, ""
