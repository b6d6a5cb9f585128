"""
Simulated accounts: login, signup, email verification and per-user profile
data with saved profile templates.

State lives behind a small repository (``get(key)`` / ``put(key, value)``).
`JsonFileRepository` keeps it in one JSON file on disk, `InMemoryRepository`
is used by tests. The logged-in user belongs to the AccountStore instance,
so each browser session keeps its own.
"""

from __future__ import annotations
import copy
import json
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

import config
from cleaner import empty_profile, normalise_profile
from utils import _sha

logger = logging.getLogger(__name__)

USERS_KEY = "users"


class Repository(ABC):
    @abstractmethod
    def get(self, key: str) -> Any:
        """Stored value for `key`, or None."""

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        ...


class InMemoryRepository(Repository):
    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileRepository(Repository):
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or config.ACCOUNTS_PATH)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def get(self, key: str) -> Any:
        return self._read().get(key)

    def put(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


class LoginResult(NamedTuple):
    success: bool
    user: Optional[Dict[str, Any]] = None
    error: Optional[str] = None  # "not_found" | "unverified"


def _new_user(email: str, password: str, role: str, full_name: str = "", verified: bool = False) -> Dict[str, Any]:
    profile = empty_profile()
    profile.update(fullName=full_name, email=email)
    return {
        "id": f"user-{uuid.uuid4().hex[:12]}",
        "email": email,
        "passwordHash": _sha(password),
        "role": role,
        "profileData": profile,
        "templates": [],
        "isVerified": verified,
    }


def _default_users() -> List[Dict[str, Any]]:
    admin = _new_user("admin@app.com", "admin", "Admin", "Admin User", verified=True)
    client = _new_user("client@app.com", "client", "Client", "Client User", verified=True)
    admin["id"], client["id"] = "admin-1", "client-1"
    return [admin, client]


class AccountStore:
    def __init__(self, repository: Repository | None = None):
        self.repo = repository or JsonFileRepository()
        self._current_id: Optional[str] = None
        if self.repo.get(USERS_KEY) is None:
            logger.info("Seeding default admin and client accounts")
            self.repo.put(USERS_KEY, _default_users())

    # ---------------------------------------------------------------- internals
    def _users(self) -> List[Dict[str, Any]]:
        return self.repo.get(USERS_KEY) or []

    def _find(self, email: str) -> Optional[Dict[str, Any]]:
        email = email.strip().lower()
        return next((u for u in self._users() if u["email"].lower() == email), None)

    def _save_user(self, user: Dict[str, Any]) -> None:
        users = [user if u["id"] == user["id"] else u for u in self._users()]
        self.repo.put(USERS_KEY, users)

    # ---------------------------------------------------------------- public API
    def list_users(self) -> List[Dict[str, Any]]:
        return self._users()

    def current_user(self) -> Optional[Dict[str, Any]]:
        if self._current_id is None:
            return None
        return next((u for u in self._users() if u["id"] == self._current_id), None)

    def login(self, email: str, password: str) -> LoginResult:
        user = self._find(email)
        if user is None or user["passwordHash"] != _sha(password):
            return LoginResult(False, error="not_found")
        if not user["isVerified"]:
            return LoginResult(False, user=user, error="unverified")
        self._current_id = user["id"]
        logger.info("User %s logged in", user["email"])
        return LoginResult(True, user=user)

    def logout(self) -> None:
        self._current_id = None

    def signup(self, email: str, password: str) -> LoginResult:
        """Create an unverified Client account; fails if the email is taken."""
        email = email.strip()
        if not email or not password:
            raise ValueError("Email and password are required")
        if self._find(email) is not None:
            return LoginResult(False, error="exists")
        user = _new_user(email, password, "Client")
        self.repo.put(USERS_KEY, self._users() + [user])
        logger.info("Signed up %s (unverified)", email)
        return LoginResult(True, user=user)

    def verify_user(self, email: str) -> bool:
        user = self._find(email)
        if user is None:
            return False
        user["isVerified"] = True
        self._save_user(user)
        return True

    def update_profile(self, profile: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        user = self.current_user()
        if user is None:
            return None
        user["profileData"] = normalise_profile(profile)
        self._save_user(user)
        return user

    def save_template(self, name: str, profile: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Store `profile` under `name` for the current user, replacing a same-named one."""
        name = name.strip()
        if not name:
            raise ValueError("Template name is required")
        user = self.current_user()
        if user is None:
            return None
        data = normalise_profile(profile)
        for entry in user["templates"]:
            if entry["name"] == name:
                entry["data"] = data
                break
        else:
            user["templates"].append({"id": f"template-{uuid.uuid4().hex[:12]}", "name": name, "data": data})
        self._save_user(user)
        return user
