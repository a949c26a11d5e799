from __future__ import annotations
"""Partition a permission catalog into action-prefix groups ("Action Permissions").

Groups come out in first-seen order of their prefix across the catalog; no alphabetical
resort, so the same catalog order always produces the same group order.
"""
from typing import Dict, Iterable, List

from backoffice.constants.permissions import GENERAL
from backoffice.services.classifier import action_prefix, classify, display_name
from backoffice.services.records import Permission, PermissionCategory


def group_key(name: str) -> str:
    return action_prefix(name) or GENERAL


def group(catalog: Iterable[Permission]) -> List[PermissionCategory]:
    members: Dict[str, List[int]] = {}
    access: Dict[str, str] = {}
    for perm in catalog:
        key = group_key(perm.name)
        if key not in members:
            members[key] = []
            access[key] = classify(perm.name).category
        members[key].append(perm.id)
    return [
        PermissionCategory(key=key, display_name=display_name(key), member_ids=frozenset(ids), access=access[key])
        for key, ids in members.items()
    ]


def find_category(categories: Iterable[PermissionCategory], key: str):
    for cat in categories:
        if cat.key == key:
            return cat
    return None


__all__ = ['group', 'group_key', 'find_category']
