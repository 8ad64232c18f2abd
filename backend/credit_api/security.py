"""
Credit API - Password Hashing & Policy
=======================================

What:  bcrypt hashing/verification and the password strength policy.
Who:   UserService (create with password) and AuthService (login, reset).

Policy defaults (see config.py) follow the usual identity-framework rules:
at least 6 characters with a digit, a lowercase letter, an uppercase letter
and a non-alphanumeric character. Every rule can be relaxed via env vars,
except the 72-byte ceiling that bcrypt itself imposes.
"""

from typing import List, Optional

import bcrypt

from credit_api.config import settings

# bcrypt only hashes the first 72 bytes; bcrypt 5 raises beyond that
BCRYPT_MAX_BYTES = 72


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise ValueError("Password is empty.")
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password, salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        # Malformed hash in the database
        return False


def password_policy_violations(password: str) -> List[str]:
    """
    Check a candidate password against the configured policy.

    Returns a list of human-readable violations; empty means acceptable.
    All violations are collected so the client can fix them in one go.
    """
    violations: List[str] = []

    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        violations.append(f"Passwords must be at most {BCRYPT_MAX_BYTES} bytes long.")
    if len(password) < settings.password_min_length:
        violations.append(
            f"Passwords must be at least {settings.password_min_length} characters."
        )
    if settings.password_require_digit and not any(c.isdigit() for c in password):
        violations.append("Passwords must have at least one digit ('0'-'9').")
    if settings.password_require_lowercase and not any(c.islower() for c in password):
        violations.append("Passwords must have at least one lowercase ('a'-'z').")
    if settings.password_require_uppercase and not any(c.isupper() for c in password):
        violations.append("Passwords must have at least one uppercase ('A'-'Z').")
    if settings.password_require_non_alphanumeric and password.isalnum():
        violations.append("Passwords must have at least one non alphanumeric character.")

    return violations
