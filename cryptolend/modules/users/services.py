import logging
from typing import Optional

from cryptolend.core.config import Settings, get_settings
from cryptolend.core.security import get_password_hash
from cryptolend.core.store import DocumentStore
from cryptolend.core.validation import ValidationResult, check_unique
from cryptolend.modules.users.schemas import UserDocument, normalize_email

logger = logging.getLogger(__name__)


class UserService:
    """Identity rules for users: email uniqueness and credential storage"""

    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    async def check_email_unique(self, email: str, excluding_id: Optional[int] = None) -> ValidationResult:
        """Check that no other user holds the normalized email"""
        normalized = normalize_email(email)
        result = await check_unique(self.store, UserDocument, "email", normalized, excluding_id)
        if not result.ok:
            logger.warning(f"Email {normalized} already registered")
        return result

    def hash_password(self, user: UserDocument) -> UserDocument:
        """Replace a plaintext candidate password with its hash"""
        if user.password is None:
            return user
        return user.model_copy(update={
            "hashed_password": get_password_hash(user.password, self.settings),
            "password": None,
        })
