"""
Admin authentication backed by Firebase ID token verification.
"""
import logging
from typing import Any, Optional

from firebase_admin import auth, exceptions
from pydantic import BaseModel

from ..config import AdminConfig, get_config
from ..errors import AdminAuthError
from .firestore import get_app


logger = logging.getLogger(__name__)


class AdminIdentity(BaseModel):
    """A verified admin."""
    uid: str
    email: Optional[str] = None


class AdminAuthenticator:
    """
    Grants admin access to holders of a valid ID token that carries the
    ``admin`` custom claim or belongs to an allow-listed, verified email.
    """

    def __init__(self, config: Optional[AdminConfig] = None, verifier: Any = None):
        self.config = config or get_config().admin
        self._verifier = verifier

    def _verify_token(self, id_token: str) -> dict[str, Any]:
        if self._verifier is not None:
            return self._verifier(id_token)
        return auth.verify_id_token(id_token, app=get_app(), check_revoked=True)

    def is_admin(self, claims: dict[str, Any]) -> bool:
        if claims.get("admin") is True:
            return True
        email = (claims.get("email") or "").lower()
        return bool(email) and claims.get("email_verified", False) and email in self.config.admin_emails

    def verify(self, id_token: Optional[str]) -> AdminIdentity:
        """
        Verify ``id_token`` and return the admin identity.

        Raises:
            AdminAuthError: Missing, invalid, expired or non-admin token
        """
        if not id_token:
            raise AdminAuthError("Missing credentials")

        try:
            claims = self._verify_token(id_token)
        except (ValueError, exceptions.FirebaseError) as e:
            logger.warning(f"Rejected admin token: {e}")
            raise AdminAuthError("Invalid or expired credentials") from e

        if not self.is_admin(claims):
            logger.warning(f"User {claims.get('uid')} is not an admin")
            raise AdminAuthError("Not authorized")

        return AdminIdentity(uid=claims.get("uid") or claims.get("sub", ""), email=claims.get("email"))
