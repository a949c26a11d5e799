from __future__ import annotations
from typing import FrozenSet, Iterable, Set, Tuple

from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.records import CategoryState, PermissionCategory


class SelectionModel:
    """Selected permission ids for one role editor session.

    Invariant: selected ids are always a subset of the catalog ids. Category state is
    derived from the selection on every query; nothing per-category is stored.
    """

    def __init__(self, catalog: PermissionCatalogIndex, initial: Iterable[int] = ()):
        self._catalog = catalog
        self._selected: Set[int] = {pid for pid in initial if pid in catalog}

    @property
    def selected_ids(self) -> FrozenSet[int]:
        return frozenset(self._selected)

    @property
    def count(self) -> int:
        return len(self._selected)

    def is_selected(self, permission_id: int) -> bool:
        return permission_id in self._selected

    def toggle(self, permission_id: int) -> None:
        if permission_id not in self._catalog:
            return
        if permission_id in self._selected:
            self._selected.discard(permission_id)
        else:
            self._selected.add(permission_id)

    def select_category(self, category: PermissionCategory, checked: bool) -> None:
        if checked:
            self._selected |= {pid for pid in category.member_ids if pid in self._catalog}
        else:
            self._selected -= category.member_ids

    def clear_all(self) -> None:
        self._selected.clear()

    def category_counts(self, category: PermissionCategory) -> Tuple[int, int]:
        """(selected, total) for a category checkbox label."""
        return len(self._selected & category.member_ids), len(category.member_ids)

    def category_state(self, category: PermissionCategory) -> CategoryState:
        hits, total = self.category_counts(category)
        if hits == 0:
            return CategoryState.EMPTY
        if hits == total:
            return CategoryState.FULL
        return CategoryState.PARTIAL


__all__ = ['SelectionModel']
