"""Plain records exchanged between the engine and its collaborators."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, NamedTuple, Tuple

from backoffice.constants.permissions import DEFAULT_GUARD_NAME


@dataclass(frozen=True)
class Permission:
    id: int
    name: str
    guard_name: str = DEFAULT_GUARD_NAME

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Permission':
        return cls(
            id=int(data['id']),
            name=data['name'],
            guard_name=data.get('guard_name') or DEFAULT_GUARD_NAME,
        )


@dataclass(frozen=True)
class Role:
    id: int
    name: str
    guard_name: str = DEFAULT_GUARD_NAME
    permission_names: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Role':
        # permissions arrive either as bare names or as permission objects
        names = []
        for item in data.get('permissions') or data.get('permission_names') or []:
            if isinstance(item, Mapping):
                if item.get('name'):
                    names.append(item['name'])
            elif item:
                names.append(str(item))
        return cls(
            id=int(data['id']),
            name=data['name'],
            guard_name=data.get('guard_name') or DEFAULT_GUARD_NAME,
            permission_names=tuple(names),
        )


@dataclass(frozen=True)
class RolePayload:
    name: str
    guard_name: str
    permission_names: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'guard_name': self.guard_name, 'permissions': list(self.permission_names)}


@dataclass(frozen=True)
class PermissionPayload:
    """Only name and guard are persisted; category and scope stay UI-local."""
    name: str
    guard_name: str = DEFAULT_GUARD_NAME

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'guard_name': self.guard_name}


class Classification(NamedTuple):
    category: str
    scope: str


@dataclass(frozen=True)
class PermissionCategory:
    key: str
    display_name: str
    member_ids: FrozenSet[int] = field(default_factory=frozenset)
    access: str = 'general'


class CategoryState(str, Enum):
    FULL = 'FULL'
    PARTIAL = 'PARTIAL'
    EMPTY = 'EMPTY'


__all__ = [
    'Permission', 'Role', 'RolePayload', 'PermissionPayload', 'Classification',
    'PermissionCategory', 'CategoryState',
]
