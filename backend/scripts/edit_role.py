#!/usr/bin/env python
"""Edit (or create) a role's permission assignment against a remote back office API.

Usage:
    python backend/scripts/edit_role.py --role-id 3 --grant-category view
    python backend/scripts/edit_role.py --role-id 3 --revoke-category delete --toggle 12 --dry-run
    python backend/scripts/edit_role.py --name content_manager --grant-category view --grant-category edit

The API base URL and token come from BACKOFFICE_API_URL / BACKOFFICE_API_TOKEN unless passed explicitly.
Exit codes: 0 ok, 2 validation errors, 3 load/submit failure.
"""
from __future__ import annotations
import os, sys, argparse, textwrap, logging

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from dotenv import load_dotenv

from backoffice.services.gateways import HttpRoleGateway
from backoffice.services.role_editor import EditorState, RoleEditor

STATE_MARKS = {'FULL': '[x]', 'PARTIAL': '[-]', 'EMPTY': '[ ]'}


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Assign permissions to a role by category",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  edit_role.py --role-id 3 --grant-category view\n  edit_role.py --name auditor --grant-category view --dry-run\n""")
    )
    p.add_argument('--base-url', default=os.getenv('BACKOFFICE_API_URL', 'http://localhost:8000'))
    p.add_argument('--token', default=os.getenv('BACKOFFICE_API_TOKEN'))
    p.add_argument('--timeout', type=float, default=float(os.getenv('BACKOFFICE_API_TIMEOUT', '10')))
    p.add_argument('--role-id', type=int, help='Existing role to edit (omit to create a new role)')
    p.add_argument('--name', help='Role name (required when creating)')
    p.add_argument('--guard', help='Guard name')
    p.add_argument('--grant-category', action='append', default=[], metavar='KEY', help='Select every permission in a category')
    p.add_argument('--revoke-category', action='append', default=[], metavar='KEY', help='Clear every permission in a category')
    p.add_argument('--toggle', action='append', type=int, default=[], metavar='ID', help='Flip a single permission id')
    p.add_argument('--clear', action='store_true', help='Start from an empty selection')
    p.add_argument('--strict', action='store_true', help='Block submission if the role references unknown permissions')
    p.add_argument('--drop-unresolved', action='store_true', help='With --strict, accept dropping permissions missing from the catalog')
    p.add_argument('--dry-run', action='store_true', help='Print the resulting assignment without saving')
    p.add_argument('-v', '--verbose', action='store_true')
    return p.parse_args(argv)


def print_categories(editor: RoleEditor):
    for row in editor.snapshot():
        mark = STATE_MARKS[row['state']]
        print(f"{mark} {row['display_name']} ({row['selected']}/{row['total']})")
        for perm in row['permissions']:
            print(f"    {'*' if perm['selected'] else ' '} {perm['id']:>4} {perm['name']}")


def apply_edits(editor: RoleEditor, args) -> None:
    if args.drop_unresolved:
        editor.acknowledge_unresolved()
    if args.clear:
        editor.clear_all()
    for key in args.grant_category:
        editor.select_category(key, True)
    for key in args.revoke_category:
        editor.select_category(key, False)
    for pid in args.toggle:
        editor.toggle(pid)
    if args.name:
        editor.set_name(args.name)
    if args.guard:
        editor.set_guard_name(args.guard)


def main(argv=None, gateway=None) -> int:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    gateway = gateway or HttpRoleGateway(args.base_url, token=args.token, timeout=args.timeout)
    editor = RoleEditor(gateway, strict_names=args.strict)
    try:
        if editor.open(args.role_id) is EditorState.FAILED:
            print(f"[ERROR] Could not load editor: {editor.error}")
            return 3
        for name in editor.unresolved_names:
            print(f"[WARN] Role references permission missing from catalog: {name}")
        try:
            apply_edits(editor, args)
        except KeyError as e:
            print(f"[ERROR] Unknown category {e}")
            return 2
        print_categories(editor)
        if args.dry_run:
            payload = editor.payload()
            print(f"[DRY-RUN] {payload.name} ({payload.guard_name}): {len(payload.permission_names)} permissions")
            return 0
        state = editor.submit()
        if state is EditorState.READY:
            for field, message in sorted(editor.field_errors.items()):
                print(f"[INVALID] {field}: {message}")
            return 2
        if state is EditorState.FAILED:
            print(f"[ERROR] Submit failed: {editor.error}")
            return 3
        print(f"[DONE] Saved role {editor.result.name} (id={editor.result.id}) with {len(editor.result.permission_names)} permissions")
        return 0
    finally:
        editor.close()


if __name__ == '__main__':
    sys.exit(main())
