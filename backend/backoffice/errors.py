from __future__ import annotations
"""Exception taxonomy for the role assignment engine and its collaborators.

The pure components (classifier, grouping, selection) never raise for valid input.
Only the catalog index and the name/id bridge report conditions; the role editor
decides whether a condition blocks the workflow or is merely logged.
"""
from typing import Dict, Iterable, Optional


class BackofficeError(Exception):
    """Base class for all engine errors."""


class ValidationError(BackofficeError):
    """Field-level validation failure; recoverable by correcting the input."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__('; '.join(f"{k}: {v}" for k, v in sorted(self.field_errors.items())))


class DuplicateIdentifierError(BackofficeError):
    """Two catalog permissions share an id (upstream data corruption)."""

    def __init__(self, identifier: int, names: Iterable[str]):
        self.identifier = identifier
        self.names = tuple(names)
        super().__init__(f"Duplicate permission id {identifier}: {', '.join(self.names)}")


class UnresolvedPermissionName(BackofficeError):
    """A role references a permission name absent from the loaded catalog.

    Normally collected as a warning record; raised only under the strict name policy.
    """

    def __init__(self, name: str, role_id: Optional[int] = None):
        self.name = name
        self.role_id = role_id
        super().__init__(f"Unknown permission name '{name}'" + (f" on role {role_id}" if role_id is not None else ''))


class GatewayError(BackofficeError):
    """Fetch or persist failure in an external collaborator. Retryable."""


class NotFoundError(GatewayError):
    def __init__(self, resource: str, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        detail = f"{resource} {resource_id} not found" if resource_id is not None else f"{resource} not found"
        super().__init__(detail)


class ConflictError(GatewayError):
    """Write rejected because it collides with existing data (duplicate name)."""


class IllegalTransition(BackofficeError):
    """State machine misuse (operation invoked from a state that does not allow it)."""


__all__ = [
    'BackofficeError', 'ValidationError', 'DuplicateIdentifierError', 'UnresolvedPermissionName',
    'GatewayError', 'NotFoundError', 'ConflictError', 'IllegalTransition',
]
