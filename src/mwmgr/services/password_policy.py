"""
Password Policy

Strength rules for new passwords and bcrypt hashing helpers.
"""
import re
from dataclasses import dataclass
from typing import List, Tuple

import bcrypt

from ..config import Config


@dataclass
class PasswordRequirements:
    """Password complexity requirements"""
    min_length: int = Config.MIN_PASSWORD_LENGTH
    require_lowercase: bool = True
    require_uppercase: bool = True
    require_digit: bool = True
    max_bytes: int = 72                 # bcrypt input limit


DEFAULT_REQUIREMENTS = PasswordRequirements()


def validate_password(
    password: str,
    requirements: PasswordRequirements = DEFAULT_REQUIREMENTS,
) -> Tuple[bool, List[str]]:
    """
    Validate password against the strength policy.

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors: List[str] = []

    if len(password) < requirements.min_length:
        errors.append(f"Password must be at least {requirements.min_length} characters long")

    if len(password.encode("utf-8")) > requirements.max_bytes:
        errors.append(f"Password must be at most {requirements.max_bytes} bytes long")

    if requirements.require_lowercase and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if requirements.require_uppercase and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if requirements.require_digit and not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one digit")

    return len(errors) == 0, errors


def hash_password(password: str, rounds: int = Config.PASSWORD_SALT_ROUNDS) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def check_password(password: str, password_hash: str) -> bool:
    """Verify password against hash"""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False
