"""Recipient codes — the inbox key, room id and only credential in one.

Codes are short human-shareable tokens, not secrets. Nothing checks them
for uniqueness: two recipients who pick the same code share one inbox.
"""

import secrets
import string
from typing import Optional

from complimentbox.errors import ValidationError

CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_code(code: Optional[str]) -> str:
    """Strip and uppercase a recipient code. Blank codes are rejected."""
    if code is None or not code.strip():
        raise ValidationError("recipient code is required")
    return code.strip().upper()


def generate_code(length: int = CODE_LENGTH) -> str:
    """Generate a fresh random code, e.g. 'K3XQ9A'."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
