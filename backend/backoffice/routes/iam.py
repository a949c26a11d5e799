from datetime import date
from flask import Blueprint, Response, current_app, request, abort
from backoffice.config.pagination import normalize_pagination, paginate
from backoffice.errors import ValidationError
from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.gateways import SqlRoleGateway
from backoffice.services.grouping import group
from backoffice.services.permission_views import describe, is_system, search, stats, to_csv
from backoffice.services.records import PermissionPayload, RolePayload
from backoffice.services.role_editor import EditorState, RoleEditor
from backoffice.services.classifier import display_name
from backoffice.utils.validation import validate_permission_fields, validate_role_fields, ensure_valid

iam_bp = Blueprint('iam', __name__)


def _gateway():
    return SqlRoleGateway()


def _page(rows):
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    return paginate(rows, limit, offset)


def _permission_rows():
    return [describe(p) for p in _gateway().fetch_permissions()]


def _role_body(role):
    return {'id': role.id, 'name': role.name, 'guard_name': role.guard_name, 'permissions': list(role.permission_names)}


def _guards():
    return current_app.config['ALLOWED_GUARD_NAMES']


# --- Permissions ---

@iam_bp.get('/permissions')
def list_permissions():
    rows = search(_permission_rows(), request.args.get('search', ''))
    return _page(rows)


@iam_bp.get('/permissions/stats')
def permission_stats():
    return stats(_permission_rows())


@iam_bp.get('/permissions/groups')
def permission_groups():
    catalog = PermissionCatalogIndex(_gateway().fetch_permissions())
    return {
        'data': [
            {
                'key': cat.key,
                'display_name': cat.display_name,
                'access': cat.access,
                'permissions': [
                    {'id': p.id, 'name': p.name, 'display_name': display_name(p.name)}
                    for p in catalog if p.id in cat.member_ids
                ],
            } for cat in group(catalog)
        ]
    }


@iam_bp.get('/permissions/export.csv')
def export_permissions():
    rows = _permission_rows()
    if not rows:
        abort(404, description='No permissions to export')
    filename = f"permissions_export_{date.today().isoformat()}.csv"
    return Response(
        to_csv(rows),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@iam_bp.get('/permissions/<int:permission_id>')
def get_permission(permission_id: int):
    return describe(_gateway().get_permission(permission_id))


@iam_bp.post('/permissions')
def create_permission():
    data = request.json or {}
    name = data.get('name')
    guard = data.get('guard_name') or current_app.config['DEFAULT_GUARD_NAME']
    ensure_valid(validate_permission_fields(name, guard, _guards()))
    perm = _gateway().create_permission(PermissionPayload(name=name, guard_name=guard))
    return {'message': 'Permission created successfully', 'data': describe(perm)}, 201


@iam_bp.put('/permissions/<int:permission_id>')
def update_permission(permission_id: int):
    gateway = _gateway()
    current = gateway.get_permission(permission_id)
    if is_system(current.name):
        abort(403, description='System permissions cannot be edited')
    data = request.json or {}
    name = data.get('name', current.name)
    guard = data.get('guard_name', current.guard_name)
    ensure_valid(validate_permission_fields(name, guard, _guards()))
    perm = gateway.update_permission(permission_id, PermissionPayload(name=name, guard_name=guard))
    return {'message': 'Permission updated successfully', 'data': describe(perm)}


@iam_bp.delete('/permissions/<int:permission_id>')
def delete_permission(permission_id: int):
    gateway = _gateway()
    current = gateway.get_permission(permission_id)
    if is_system(current.name):
        abort(403, description='System permissions cannot be deleted')
    gateway.delete_permission(permission_id)
    return {'message': 'Permission deleted successfully'}


# --- Roles ---

def _role_payload(data, defaults=None):
    defaults = defaults or {}
    name = data.get('name', defaults.get('name'))
    guard = data.get('guard_name') or defaults.get('guard_name') or current_app.config['DEFAULT_GUARD_NAME']
    names = data.get('permissions', defaults.get('permissions', []))
    if names is None:
        names = []
    if not isinstance(names, list) or any(not isinstance(n, str) for n in names):
        raise ValidationError({'permissions': 'permissions must be a list of permission names'})
    ensure_valid(validate_role_fields(name, guard, _guards()))
    return RolePayload(name=name, guard_name=guard, permission_names=tuple(names))


@iam_bp.get('/roles')
def list_roles():
    return _page([_role_body(r) for r in _gateway().list_roles()])


@iam_bp.get('/roles/<int:role_id>')
def get_role(role_id: int):
    return _role_body(_gateway().fetch_role(role_id))


@iam_bp.post('/roles')
def create_role():
    payload = _role_payload(request.json or {})
    role = _gateway().create_role(payload)
    return _role_body(role), 201


@iam_bp.put('/roles/<int:role_id>')
def update_role(role_id: int):
    gateway = _gateway()
    current = gateway.fetch_role(role_id)
    payload = _role_payload(request.json or {}, defaults=_role_body(current))
    return _role_body(gateway.update_role(role_id, payload))


@iam_bp.delete('/roles/<int:role_id>')
def delete_role(role_id: int):
    _gateway().delete_role(role_id)
    return {'message': 'Role deleted successfully'}


@iam_bp.get('/roles/<int:role_id>/assignment')
def role_assignment(role_id: int):
    """Category view of a role's permissions as the role editor would open it."""
    editor = RoleEditor(
        _gateway(),
        strict_names=current_app.config['ROLE_EDITOR_STRICT_NAMES'],
        default_guard=current_app.config['DEFAULT_GUARD_NAME'],
        allowed_guards=_guards(),
    )
    try:
        if editor.open(role_id) is EditorState.FAILED:
            raise editor.error
        return {
            'role': _role_body(editor.role),
            'selected_count': len(editor.selected_ids),
            'categories': editor.snapshot(),
            'unresolved': editor.unresolved_names,
        }
    finally:
        editor.close()
