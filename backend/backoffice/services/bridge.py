from __future__ import annotations
"""Translate between backend permission names and editor-local permission ids.

The backend owns names; ids only exist for set operations and checkbox binding.
Tolerance is asymmetric by intent:
  - names_to_ids collects names missing from the catalog into ``unresolved`` and keeps going
  - ids_to_names drops unknown ids so nothing outside the catalog snapshot is ever submitted
"""
from typing import Iterable, List, Set, Tuple

from backoffice.services.catalog import PermissionCatalogIndex


def names_to_ids(names: Iterable[str], index: PermissionCatalogIndex) -> Tuple[Set[int], List[str]]:
    ids: Set[int] = set()
    unresolved: List[str] = []
    for name in names:
        perm = index.find_by_name(name)
        if perm is None:
            if name not in unresolved:
                unresolved.append(name)
            continue
        ids.add(perm.id)
    return ids, unresolved


def ids_to_names(ids: Iterable[int], index: PermissionCatalogIndex) -> List[str]:
    """Names in catalog order, so submitted payloads are stable across runs."""
    wanted = set(ids)
    return [perm.name for perm in index if perm.id in wanted]


__all__ = ['names_to_ids', 'ids_to_names']
