"""
botsuite/services/credential_store.py

Purpose: User credential persistence

- Reads the flat JSON users file ({"users": [...]})
- Verifies passwords (bcrypt hashes, legacy plaintext behind a flag)
- Updates nicknames with a single-writer load-mutate-persist cycle
- Creates users for the admin script (no registration endpoint)
"""

import hmac
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Dict, Any, List

import bcrypt

from botsuite.core.config import settings
from botsuite.core.exceptions import ResourceNotFoundError
from botsuite.core.logging import get_logger, LogContext
from botsuite.utils.constants import MSG_USER_NOT_FOUND

logger = get_logger(__name__)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def is_hashed(stored: str) -> bool:
    return stored.startswith(BCRYPT_PREFIXES)


class CredentialStore:
    """
    Flat-file user store.

    Every write goes through `_lock`, so concurrent nickname updates cannot
    drop each other's changes. Writes land in a temporary sibling file that
    replaces the original atomically.
    """

    def __init__(self, path: str, allow_plaintext: bool = True):
        self.path = Path(path)
        self.allow_plaintext = allow_plaintext
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    def load(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Reads the users document.

        Missing, empty or corrupt files yield an empty user list.
        """
        if not self.path.exists():
            return {"users": []}

        try:
            raw = self.path.read_bytes().decode("utf-8")
            if not raw.strip():
                return {"users": []}
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.error(f"Invalid users file {self.path}, treating as empty")
            return {"users": []}

        if not isinstance(data, dict) or not isinstance(data.get("users"), list):
            logger.error(f"Unexpected users file shape in {self.path}, treating as empty")
            return {"users": []}

        return data

    def _write(self, data: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def _find(data: Dict[str, Any], uid: str) -> Optional[Dict[str, Any]]:
        for user in data["users"]:
            if isinstance(user, dict) and user.get("uid") == uid:
                return user
        return None

    def find_user(self, uid: str) -> Optional[Dict[str, Any]]:
        """Returns the user record for `uid` or None."""
        return self._find(self.load(), uid)

    def verify_password(self, stored: Optional[str], supplied: str) -> bool:
        """
        Checks a supplied password against the stored value.

        Bcrypt hashes are verified with bcrypt. Any other value is a legacy
        plaintext password and only matches when plaintext is allowed.
        """
        if not stored or not isinstance(stored, str):
            return False

        if is_hashed(stored):
            try:
                return bcrypt.checkpw(supplied.encode("utf-8"), stored.encode("utf-8"))
            except ValueError:
                logger.error("Malformed bcrypt hash in users file")
                return False

        if not self.allow_plaintext:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))

    def authenticate(self, uid: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Returns the user record when uid and password match, otherwise None.
        """
        with LogContext(uid=uid):
            user = self.find_user(uid)
            if not user or not self.verify_password(user.get("password"), password):
                logger.info("Login rejected")
                return None

            if not is_hashed(user["password"]):
                logger.warning("User authenticated with a plaintext password; run the rehash script")

            logger.info("Login accepted")
            return user

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_nickname(self, uid: str, nickname: str) -> Dict[str, Any]:
        """
        Sets the nickname of an existing user.

        Raises:
            ResourceNotFoundError: If the uid is not in the store
        """
        with LogContext(uid=uid):
            with self._lock:
                data = self.load()
                user = self._find(data, uid)
                if not user:
                    logger.warning("Nickname update for unknown user")
                    raise ResourceNotFoundError(MSG_USER_NOT_FOUND)

                user["nickname"] = nickname
                self._write(data)

            logger.info("Nickname updated")
            return user

    def upsert_user(self, uid: str, password: str, nickname: Optional[str] = None) -> Dict[str, Any]:
        """
        Creates or replaces a user, storing a bcrypt hash of the password.
        An existing nickname is kept unless a new one is given.
        """
        with self._lock:
            data = self.load()
            user = self._find(data, uid)
            if user is None:
                user = {"uid": uid, "password": "", "nickname": ""}
                data["users"].append(user)
            user["password"] = hash_password(password)
            if nickname is not None:
                user["nickname"] = nickname
            self._write(data)

        logger.info(f"User {uid} saved")
        return user

    def rehash_plaintext(self) -> int:
        """
        Replaces every plaintext password with its bcrypt hash.

        Returns:
            Number of records converted
        """
        converted = 0
        with self._lock:
            data = self.load()
            for user in data["users"]:
                stored = user.get("password") if isinstance(user, dict) else None
                if isinstance(stored, str) and stored and not is_hashed(stored):
                    user["password"] = hash_password(stored)
                    converted += 1
            if converted:
                self._write(data)

        logger.info(f"Rehashed {converted} plaintext password(s)")
        return converted


# Global credential store instance
_credential_store: Optional[CredentialStore] = None


def get_credential_store() -> CredentialStore:
    """Get or create the global credential store."""
    global _credential_store
    if _credential_store is None:
        _credential_store = CredentialStore(
            settings.USERS_FILE,
            allow_plaintext=settings.ALLOW_PLAINTEXT_PASSWORDS,
        )
    return _credential_store
