"""
utils/validation_utils.py

Purpose: Input validation

- 4-digit numeric secret check
- Required-field presence check
- Upload filename extension extraction
"""

import os
import re
from typing import Optional

SECRET_PATTERN = re.compile(r"[0-9]{4}")
EXTENSION_PATTERN = re.compile(r"\.[a-z0-9]{1,10}")


def validate_secret(secret: Optional[str]) -> bool:
    """
    Validates a delete secret.
    
    Must be exactly four ASCII digits. No trimming or coercion is applied,
    so " 1234" and "1234\\n" are rejected just like "12a4".
    
    Args:
        secret: Secret string to validate
    
    Returns:
        True if valid, False otherwise
    """
    if not isinstance(secret, str):
        return False
    return SECRET_PATTERN.fullmatch(secret) is not None


def is_blank(value: Optional[str]) -> bool:
    """
    Checks whether a required field is missing or empty.
    """
    return value is None or value == ""


def safe_extension(filename: Optional[str]) -> str:
    """
    Extracts a lower-case extension from an uploaded filename.
    
    Examples:
        "Avatar.PNG" -> ".png"
        "archive.tar.gz" -> ".gz"
        "noext" -> ""
        "../../evil.sh;rm" -> ""
    """
    if not filename:
        return ""
    ext = os.path.splitext(os.path.basename(filename))[1].lower()
    if EXTENSION_PATTERN.fullmatch(ext):
        return ext
    return ""
