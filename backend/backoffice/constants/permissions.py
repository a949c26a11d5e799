"""Central definitions for permission classification and seed data.
Table order is part of the contract: lookups probe entries top to bottom and the first match wins.
Extend cautiously; never reorder entries silently, append new ones at the end.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

GENERAL = 'general'

DEFAULT_GUARD_NAME = 'web'
ALLOWED_GUARD_NAMES = ('web', 'api')

# action prefix -> access category
ACTION_TABLE: Tuple[Tuple[str, str], ...] = (
    ('view', 'read'),
    ('create', 'write'),
    ('edit', 'write'),
    ('update', 'write'),
    ('delete', 'delete'),
    ('manage', 'admin'),
    ('admin', 'admin'),
)

# resource fragment -> scope (substring match against the name minus its action prefix)
RESOURCE_TABLE: Tuple[Tuple[str, str], ...] = (
    ('user', 'users'),
    ('role', 'roles'),
    ('permission', 'permissions'),
    ('product', 'products'),
    ('order', 'orders'),
    ('category', 'categories'),
    ('content', 'content'),
    ('setting', 'settings'),
)

ACCESS_CATEGORIES = ('read', 'write', 'delete', 'admin', GENERAL)

# Permissions the admin UI must never edit or delete
SYSTEM_PERMISSIONS = frozenset({'view_admin', 'manage_users', 'manage_roles'})

SEED_ACTIONS = ['view', 'create', 'edit', 'delete']
SEED_RESOURCES = ['users', 'roles', 'permissions', 'products', 'orders', 'categories']
SEED_EXTRA = ['view_admin', 'manage_users', 'manage_roles', 'manage_settings', 'manage_content']


def build_all_permission_names() -> List[str]:
    names: List[str] = []
    for action in SEED_ACTIONS:
        for resource in SEED_RESOURCES:
            names.append(f"{action}_{resource}")
    for extra in SEED_EXTRA:
        if extra not in names:
            names.append(extra)
    return names

ALL_PERMISSION_NAMES = build_all_permission_names()

ROLE_PRESETS: Dict[str, List[str]] = {
    'admin': ['*'],
    'seller': [
        'view_admin',
        'view_products', 'create_products', 'edit_products',
        'view_orders', 'edit_orders',
        'view_categories',
    ],
    'customer': ['view_products', 'view_categories', 'create_orders'],
}
