"""Test seeding utilities and an in-memory gateway to reduce duplication.

The SQL helpers create permission/role rows directly; FakeGateway stands in for the
remote collaborator so role editor tests can script failures and mid-flight closes.
"""
from typing import Callable, Dict, Iterable, List, Optional
from backoffice import get_db
from backoffice.errors import ConflictError, GatewayError, NotFoundError
from backoffice.models.authz import Permission, Role, RolePermission
from backoffice.services import records


def ensure_permissions(names: Iterable[str], guard_name: str = 'web') -> Dict[str, Permission]:
    """Ensure each permission name exists; return dict name->Permission."""
    session = get_db()
    out: Dict[str, Permission] = {}
    for name in names:
        obj = session.query(Permission).filter_by(name=name).one_or_none()
        if not obj:
            obj = Permission(name=name, guard_name=guard_name)
            session.add(obj); session.flush()
        out[name] = obj
    session.commit()
    return out


def ensure_role(name: str, perm_names: Iterable[str] = (), guard_name: str = 'web') -> Role:
    session = get_db()
    role = session.query(Role).filter_by(name=name).one_or_none()
    perms = ensure_permissions(perm_names) if perm_names else {}
    if not role:
        role = Role(name=name, guard_name=guard_name)
        session.add(role); session.flush()
    existing_perm_ids = {rp.permission_id for rp in session.query(RolePermission).filter_by(role_id=role.id)}
    for p in perms.values():
        if p.id not in existing_perm_ids:
            session.add(RolePermission(role_id=role.id, permission_id=p.id))
    session.commit()
    return role


class FakeGateway:
    """Scriptable in-memory collaborator.

    ``fail`` maps an operation name to a list of exceptions raised on successive calls;
    ``hooks`` maps an operation name to a callable run before the operation returns.
    """

    def __init__(self, permissions: List[records.Permission], roles: Optional[List[records.Role]] = None):
        self.permissions = list(permissions)
        self.roles = {r.id: r for r in (roles or [])}
        self.fail: Dict[str, List[Exception]] = {}
        self.hooks: Dict[str, Callable[[], None]] = {}
        self.calls: List[tuple] = []
        self.saved: List[records.RolePayload] = []

    def _step(self, op: str, *args):
        self.calls.append((op,) + args)
        pending = self.fail.get(op)
        if pending:
            raise pending.pop(0)
        hook = self.hooks.get(op)
        if hook:
            hook()

    def fetch_permissions(self):
        self._step('fetch_permissions')
        return list(self.permissions)

    def fetch_role(self, role_id):
        self._step('fetch_role', role_id)
        if role_id not in self.roles:
            raise NotFoundError('Role', role_id)
        return self.roles[role_id]

    def create_role(self, payload):
        self._step('create_role', payload)
        if any(r.name == payload.name for r in self.roles.values()):
            raise ConflictError(f"role '{payload.name}' exists")
        new_id = max(self.roles, default=0) + 1
        role = records.Role(new_id, payload.name, payload.guard_name, tuple(payload.permission_names))
        self.roles[new_id] = role
        self.saved.append(payload)
        return role

    def update_role(self, role_id, payload):
        self._step('update_role', role_id, payload)
        role = records.Role(role_id, payload.name, payload.guard_name, tuple(payload.permission_names))
        self.roles[role_id] = role
        self.saved.append(payload)
        return role

    def create_permission(self, payload):
        self._step('create_permission', payload)
        perm = records.Permission(max((p.id for p in self.permissions), default=0) + 1, payload.name, payload.guard_name)
        self.permissions.append(perm)
        return perm

    def update_permission(self, permission_id, payload):
        self._step('update_permission', permission_id, payload)
        raise GatewayError('read-only fake')


__all__ = ['ensure_permissions', 'ensure_role', 'FakeGateway']
