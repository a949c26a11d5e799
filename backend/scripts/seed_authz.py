#!/usr/bin/env python
"""Idempotent seed script for permissions & roles.

Usage:
    python backend/scripts/seed_authz.py               # seed normally
    python backend/scripts/seed_authz.py --show-roles  # print role -> permission counts (after ensuring seed)
    python backend/scripts/seed_authz.py --show-groups # print the action-prefix permission groups
    python backend/scripts/seed_authz.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_authz.py --export-json roles.json
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json, hashlib
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from backoffice import create_app, get_db  # type: ignore
from backoffice.models.authz import Base, Permission, Role, RolePermission
from backoffice.constants.permissions import ALL_PERMISSION_NAMES, ROLE_PRESETS, DEFAULT_GUARD_NAME
from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.gateways import SqlRoleGateway
from backoffice.services.grouping import group


def ensure_permissions(session, guard_name: str = DEFAULT_GUARD_NAME):
    existing = {p.name for p in session.execute(select(Permission)).scalars().all()}
    created = 0
    for name in ALL_PERMISSION_NAMES:
        if name not in existing:
            session.add(Permission(name=name, guard_name=guard_name))
            created += 1
    session.flush()
    return created


def ensure_roles(session, guard_name: str = DEFAULT_GUARD_NAME):
    existing_roles = {r.name: r for r in session.execute(select(Role)).scalars().all()}
    created = 0
    for role_name in ROLE_PRESETS:
        if role_name not in existing_roles:
            role = Role(name=role_name, guard_name=guard_name)
            session.add(role)
            existing_roles[role_name] = role
            created += 1
    session.flush()

    perms_map = {p.name: p for p in session.execute(select(Permission)).scalars()}
    for role_name, names in ROLE_PRESETS.items():
        role = existing_roles[role_name]
        # Expand wildcard to every permission currently in the catalog
        desired = set(perms_map) if '*' in names else set(names)
        current = {rp.permission.name for rp in role.permissions}
        for name in sorted(desired - current):
            if name not in perms_map:
                print(f"[WARN] Missing permission referenced by role {role_name}: {name}")
                continue
            session.add(RolePermission(role=role, permission=perms_map[name]))
    session.flush()
    return created


def build_role_permission_map(session):
    mapping = {}
    for role in session.execute(select(Role)).scalars().all():
        mapping[role.name] = sorted({rp.permission.name for rp in role.permissions})
    return mapping


def print_role_summary(session):
    rows = [(name, len(perms), perms[:8]) for name, perms in build_role_permission_map(session).items()]
    if not rows:
        print("[INFO] No roles present.")
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, cnt, sample in rows:
        print(f"{name.ljust(name_w)} | {str(cnt).rjust(5)} | {', '.join(sample)}")


def print_group_summary(gateway):
    catalog = PermissionCatalogIndex(gateway.fetch_permissions())
    for cat in group(catalog):
        members = [p.name for p in catalog if p.id in cat.member_ids]
        print(f"{cat.display_name} ({cat.access}, {len(members)}): {', '.join(members)}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed role/permission catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_authz.py\n  dry run: seed_authz.py --dry-run\n  show roles: seed_authz.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print role permission counts after seeding')
    p.add_argument('--show-groups', action='store_true', help='Print permission groups by action prefix')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--guard', default=DEFAULT_GUARD_NAME, help='Guard name for newly created rows')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export role->permissions JSON (to FILE or stdout if omitted)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            # Ensure tables exist (lightweight fallback if migrations not run yet)
            session.execute(text('SELECT 1 FROM permissions LIMIT 1'))
        except Exception:
            # Auto-create schema for bootstrap; in real env prefer alembic upgrade
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        finally:
            session.commit()

    with app.app_context():
        session = get_db()
        try:
            created_p = ensure_permissions(session, args.guard)
            created_r = ensure_roles(session, args.guard)
            role_perm_map = build_role_permission_map(session)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Permissions would create: {created_p}, Roles would create: {created_r}")
            else:
                session.commit()
                print(f"[DONE] Permissions created: {created_p}, Roles created: {created_r}")
            if args.show_roles:
                print('\nRole Permission Summary:')
                print_role_summary(session)
            if args.show_groups:
                print('\nPermission Groups:')
                print_group_summary(SqlRoleGateway(lambda: session))
            if args.export_json is not None:
                # Deterministic checksum for change detection
                canonical = json.dumps(role_perm_map, sort_keys=True, separators=(',', ':'))
                payload = {
                    'roles': role_perm_map,
                    'meta': {
                        'distinct_permissions': len({p for plist in role_perm_map.values() for p in plist}),
                        'roles_checksum_sha256': hashlib.sha256(canonical.encode('utf-8')).hexdigest(),
                        'dry_run': args.dry_run,
                    }
                }
                if args.export_json == '-':
                    print(json.dumps(payload, indent=2, sort_keys=True))
                else:
                    with open(args.export_json, 'w', encoding='utf-8') as f:
                        json.dump(payload, f, indent=2, sort_keys=True)
                    print(f"[INFO] Exported JSON to {args.export_json}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

if __name__ == '__main__':
    main()
