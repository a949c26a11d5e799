from __future__ import annotations
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from backoffice.errors import DuplicateIdentifierError
from backoffice.services.records import Permission

logger = logging.getLogger(__name__)


class PermissionCatalogIndex:
    """Two-way index (id and name) over one loaded permission list.

    Built once per catalog snapshot; duplicate ids abort construction because the
    grouping would otherwise silently merge two permissions into one checkbox.
    """

    def __init__(self, permissions: Iterable[Permission]):
        self._ordered: List[Permission] = []
        self.by_id: Dict[int, Permission] = {}
        self.by_name: Dict[str, Permission] = {}
        for perm in permissions:
            existing = self.by_id.get(perm.id)
            if existing is not None:
                logger.error('Duplicate permission id %s in catalog (%s, %s)', perm.id, existing.name, perm.name)
                raise DuplicateIdentifierError(perm.id, [existing.name, perm.name])
            self.by_id[perm.id] = perm
            self.by_name.setdefault(perm.name, perm)
            self._ordered.append(perm)

    def find_by_id(self, permission_id: int) -> Optional[Permission]:
        return self.by_id.get(permission_id)

    def find_by_name(self, name: str) -> Optional[Permission]:
        return self.by_name.get(name)

    @property
    def all_ids(self) -> frozenset:
        return frozenset(self.by_id)

    @property
    def permissions(self) -> List[Permission]:
        """Catalog in load order."""
        return list(self._ordered)

    def __contains__(self, permission_id) -> bool:
        return permission_id in self.by_id

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)


__all__ = ['PermissionCatalogIndex']
