from __future__ import annotations
"""Derive a permission's access category and resource scope from its name.

Names follow the ``<action>_<resource>`` convention (``view_products``, ``manage_settings``).
Classification is a pure function of the name: the same input always yields the same
Classification, and every string (including '') classifies, falling back to general/general.

Usage:
    from backoffice.services.classifier import classify
    classify('view_products')   # Classification(category='read', scope='products')
"""
from typing import Iterable, Optional, Tuple

from backoffice.constants.permissions import ACTION_TABLE, RESOURCE_TABLE, GENERAL
from backoffice.services.records import Classification

SEPARATOR = '_'

_ACTIONS = dict(ACTION_TABLE)


def split_name(name: str):
    return (name or '').split(SEPARATOR)


def action_prefix(name: str) -> Optional[str]:
    """Return the leading segment of a multi-segment name, else None."""
    segments = split_name(name)
    if len(segments) < 2:
        return None
    return segments[0]


def lookup_scope(remainder: str, table: Iterable[Tuple[str, str]] = RESOURCE_TABLE) -> str:
    for fragment, scope in table:
        if fragment in remainder:
            return scope
    return GENERAL


def classify(name: str) -> Classification:
    segments = split_name(name)
    if len(segments) < 2:
        return Classification(GENERAL, GENERAL)
    category = _ACTIONS.get(segments[0], GENERAL)
    scope = lookup_scope(SEPARATOR.join(segments[1:]))
    return Classification(category, scope)


def display_name(name: str) -> str:
    """Title-case each underscore separated segment: 'edit_products' -> 'Edit Products'."""
    return ' '.join(seg[:1].upper() + seg[1:] for seg in split_name(name) if seg)


__all__ = ['classify', 'display_name', 'action_prefix', 'lookup_scope', 'split_name']
