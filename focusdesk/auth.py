"""Mock sign-in for FocusDesk.

There is no server: any well-formed email and password is accepted.  A
user who asks to be remembered is kept in ``user.json`` next to the
settings file.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, asdict

from . import settings as _settings

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthError(ValueError):
    """Raised when a sign-in or sign-up form is not acceptable."""


@dataclass
class User:
    email: str
    name: str

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""

    @property
    def initials(self) -> str:
        return "".join(word[0] for word in self.name.split() if word)[:2].upper()


def _check_email(email: str) -> str:
    email = email.strip()
    if not email:
        raise AuthError("Please enter your email.")
    if not _EMAIL_RE.match(email):
        raise AuthError("Please enter a valid email address.")
    return email


def login(email: str, password: str) -> User:
    """Accept any well-formed credentials."""
    email = _check_email(email)
    if not password:
        raise AuthError("Please enter your password.")
    return User(email=email, name=email.split("@")[0])


def signup(
    name: str, email: str, password: str, confirm: str, *, agree_to_terms: bool,
) -> User:
    """Create a local account.  Nothing leaves the machine."""
    email = _check_email(email)
    name = name.strip()
    if not name:
        raise AuthError("Please enter your name.")
    if password != confirm:
        raise AuthError("Passwords do not match.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if not agree_to_terms:
        raise AuthError("Please agree to the terms and conditions.")
    return User(email=email, name=name)


# ── remembered session ────────────────────────────────────────────────────


def _user_path():
    return _settings.APP_SUPPORT_DIR / "user.json"


def save_user(user: User) -> None:
    _settings.APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    _user_path().write_text(json.dumps(asdict(user)) + "\n", encoding="utf-8")


def load_user() -> User | None:
    """Return the remembered user, or None when signed out."""
    path = _user_path()
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return User(email=data["email"], name=data["name"])
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.warning("Discarding unreadable user session: %s", exc)
        clear_user()
        return None


def clear_user() -> None:
    _user_path().unlink(missing_ok=True)
