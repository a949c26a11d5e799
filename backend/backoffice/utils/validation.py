from __future__ import annotations
"""Reusable validation helpers for role and permission payloads.

Each helper returns a dict of field -> message (empty when valid) so callers can show
errors inline; ``ensure_valid`` turns a non-empty dict into a ValidationError.
"""
import re
from typing import Dict, Iterable, Optional

from backoffice.constants.permissions import ALLOWED_GUARD_NAMES
from backoffice.errors import ValidationError

NAME_PATTERN = re.compile(r'^[a-z_]+$')
MAX_NAME_LENGTH = 255
MIN_PERMISSION_NAME_LENGTH = 3


def validate_guard_name(guard_name: Optional[str], allowed: Iterable[str] = ALLOWED_GUARD_NAMES) -> Optional[str]:
    if not guard_name or not guard_name.strip():
        return 'Guard name is required'
    allowed = tuple(allowed)
    if allowed and guard_name not in allowed:
        return f"Guard name must be one of: {', '.join(allowed)}"
    return None


def validate_role_fields(name: Optional[str], guard_name: Optional[str],
                         allowed_guards: Iterable[str] = ALLOWED_GUARD_NAMES) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not name or not name.strip():
        errors['name'] = 'Role name is required'
    elif not NAME_PATTERN.match(name):
        errors['name'] = 'Role name should contain only lowercase letters and underscores'
    elif len(name) > MAX_NAME_LENGTH:
        errors['name'] = f'Role name should not exceed {MAX_NAME_LENGTH} characters'
    guard_error = validate_guard_name(guard_name, allowed_guards)
    if guard_error:
        errors['guard_name'] = guard_error
    return errors


def validate_permission_fields(name: Optional[str], guard_name: Optional[str],
                               allowed_guards: Iterable[str] = ALLOWED_GUARD_NAMES) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not name or not name.strip():
        errors['name'] = 'Permission name is required'
    elif not NAME_PATTERN.match(name):
        errors['name'] = 'Permission name should contain only lowercase letters and underscores'
    elif len(name) < MIN_PERMISSION_NAME_LENGTH:
        errors['name'] = f'Permission name should be at least {MIN_PERMISSION_NAME_LENGTH} characters long'
    elif len(name) > MAX_NAME_LENGTH:
        errors['name'] = f'Permission name should not exceed {MAX_NAME_LENGTH} characters'
    guard_error = validate_guard_name(guard_name, allowed_guards)
    if guard_error:
        errors['guard_name'] = guard_error
    return errors


def ensure_valid(errors: Dict[str, str]) -> None:
    if errors:
        raise ValidationError(errors)

__all__ = ['validate_role_fields', 'validate_permission_fields', 'validate_guard_name', 'ensure_valid', 'NAME_PATTERN']
