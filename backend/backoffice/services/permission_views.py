"""Read-side helpers for the permission management screen: rows, search, stats and CSV."""
from __future__ import annotations
import csv
import io
from typing import Dict, Iterable, List

from backoffice.constants.permissions import DEFAULT_GUARD_NAME, SYSTEM_PERMISSIONS
from backoffice.services.classifier import classify, display_name
from backoffice.services.records import Permission

CSV_HEADERS = ['ID', 'Name', 'Display Name', 'Category', 'Scope', 'Guard Name']


def describe(permission: Permission) -> Dict[str, object]:
    category, scope = classify(permission.name)
    return {
        'id': permission.id,
        'name': permission.name,
        'display_name': display_name(permission.name),
        'category': category,
        'scope': scope,
        'guard_name': permission.guard_name or DEFAULT_GUARD_NAME,
        'is_system': is_system(permission.name),
    }


def is_system(name: str) -> bool:
    return name in SYSTEM_PERMISSIONS


def search(rows: Iterable[Dict[str, object]], term: str) -> List[Dict[str, object]]:
    """Case-insensitive substring match on name, display name, category or scope."""
    term = (term or '').strip().lower()
    rows = list(rows)
    if not term:
        return rows
    keys = ('name', 'display_name', 'category', 'scope')
    return [r for r in rows if any(term in str(r.get(k) or '').lower() for k in keys)]


def stats(rows: Iterable[Dict[str, object]]) -> Dict[str, int]:
    out = {'total': 0, 'read': 0, 'write': 0, 'delete': 0, 'admin': 0}
    for r in rows:
        out['total'] += 1
        if r['category'] in out:
            out[r['category']] += 1
    return out


def to_csv(rows: Iterable[Dict[str, object]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(CSV_HEADERS)
    for r in rows:
        writer.writerow([r['id'], r['name'], r['display_name'], r['category'], r['scope'], r['guard_name']])
    return buf.getvalue()


__all__ = ['describe', 'is_system', 'search', 'stats', 'to_csv', 'CSV_HEADERS']
