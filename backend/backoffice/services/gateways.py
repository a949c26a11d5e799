from __future__ import annotations
"""External collaborators of the role editor: where catalogs and roles come from and go to.

Two implementations of the same surface:
  SqlRoleGateway   -- talks to the local database through the SQLAlchemy session (backs /iam routes)
  HttpRoleGateway  -- talks to a remote back office API (``/api/permissions``, ``/api/roles``) via requests

Both return plain records (backoffice.services.records) and raise GatewayError subclasses
on fetch/persist failures so the editor can move to FAILED and offer a retry.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, List, Optional, Protocol

import requests
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from backoffice import get_db
from backoffice.errors import ConflictError, GatewayError, NotFoundError, ValidationError
from backoffice.models import authz
from backoffice.services.records import Permission, PermissionPayload, Role, RolePayload

logger = logging.getLogger(__name__)


class RoleGateway(Protocol):
    def fetch_permissions(self) -> List[Permission]: ...
    def fetch_role(self, role_id: int) -> Role: ...
    def create_role(self, payload: RolePayload) -> Role: ...
    def update_role(self, role_id: int, payload: RolePayload) -> Role: ...
    def create_permission(self, payload: PermissionPayload) -> Permission: ...
    def update_permission(self, permission_id: int, payload: PermissionPayload) -> Permission: ...


def _to_permission(row: authz.Permission) -> Permission:
    return Permission(id=row.id, name=row.name, guard_name=row.guard_name)


def _to_role(row: authz.Role) -> Role:
    return Role(id=row.id, name=row.name, guard_name=row.guard_name, permission_names=tuple(row.permission_names))


class SqlRoleGateway:
    def __init__(self, session_factory: Optional[Callable[[], Any]] = None):
        self._session_factory = session_factory or get_db

    def _session(self):
        return self._session_factory()

    @contextmanager
    def _guard(self, session, action: str):
        """Surface database failures (including lazy relationship loads) as GatewayError."""
        try:
            yield
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning('Failed to %s: %s', action, e)
            raise GatewayError(f'Failed to {action}: {e}') from e

    # --- reads ---
    def fetch_permissions(self) -> List[Permission]:
        session = self._session()
        with self._guard(session, 'fetch permissions'):
            rows = session.execute(select(authz.Permission).order_by(authz.Permission.id.asc())).scalars().all()
            return [_to_permission(p) for p in rows]

    def fetch_role(self, role_id: int) -> Role:
        session = self._session()
        with self._guard(session, 'fetch role'):
            return _to_role(self._get_role(session, role_id))

    def list_roles(self) -> List[Role]:
        session = self._session()
        with self._guard(session, 'list roles'):
            rows = session.execute(select(authz.Role).order_by(authz.Role.id.asc())).scalars().all()
            return [_to_role(r) for r in rows]

    def _get_role(self, session, role_id: int) -> authz.Role:
        role = session.execute(select(authz.Role).where(authz.Role.id==role_id)).scalar_one_or_none()
        if not role:
            raise NotFoundError('Role', role_id)
        return role

    def _get_permission(self, session, permission_id: int) -> authz.Permission:
        perm = session.execute(select(authz.Permission).where(authz.Permission.id==permission_id)).scalar_one_or_none()
        if not perm:
            raise NotFoundError('Permission', permission_id)
        return perm

    def get_permission(self, permission_id: int) -> Permission:
        session = self._session()
        with self._guard(session, 'fetch permission'):
            return _to_permission(self._get_permission(session, permission_id))

    # --- role writes ---
    def _resolve_names(self, session, names: Iterable[str]) -> List[authz.Permission]:
        names = list(dict.fromkeys(names))
        if not names:
            return []
        perms = session.execute(select(authz.Permission).where(authz.Permission.name.in_(names))).scalars().all()
        missing = set(names) - {p.name for p in perms}
        if missing:
            raise ValidationError({'permissions': f'Unknown permission names: {sorted(missing)}'})
        by_name = {p.name: p for p in perms}
        return [by_name[n] for n in names]

    def _assert_role_name_free(self, session, name: str, exclude_id: Optional[int] = None):
        q = select(authz.Role).where(authz.Role.name==name)
        if exclude_id is not None:
            q = q.where(authz.Role.id!=exclude_id)
        if session.execute(q).scalar_one_or_none():
            raise ConflictError(f"role '{name}' exists")

    def create_role(self, payload: RolePayload) -> Role:
        session = self._session()
        with self._guard(session, 'create role'):
            self._assert_role_name_free(session, payload.name)
            perms = self._resolve_names(session, payload.permission_names)
            role = authz.Role(name=payload.name, guard_name=payload.guard_name)
            for p in perms:
                role.permissions.append(authz.RolePermission(permission=p))
            session.add(role)
            self._commit(session)
            return _to_role(role)

    def update_role(self, role_id: int, payload: RolePayload) -> Role:
        session = self._session()
        with self._guard(session, 'update role'):
            role = self._get_role(session, role_id)
            self._assert_role_name_free(session, payload.name, exclude_id=role.id)
            perms = self._resolve_names(session, payload.permission_names)
            role.name = payload.name
            role.guard_name = payload.guard_name
            # Replace assignments; flush the removals first so re-added pairs do not hit uq_role_permission
            role.permissions.clear()
            session.flush()
            for p in perms:
                role.permissions.append(authz.RolePermission(permission=p))
            self._commit(session)
            return _to_role(role)

    def delete_role(self, role_id: int) -> None:
        session = self._session()
        with self._guard(session, 'delete role'):
            session.delete(self._get_role(session, role_id))
            self._commit(session)

    # --- permission writes ---
    def _assert_permission_name_free(self, session, name: str, exclude_id: Optional[int] = None):
        q = select(authz.Permission).where(authz.Permission.name==name)
        if exclude_id is not None:
            q = q.where(authz.Permission.id!=exclude_id)
        if session.execute(q).scalar_one_or_none():
            raise ConflictError(f"permission '{name}' exists")

    def create_permission(self, payload: PermissionPayload) -> Permission:
        session = self._session()
        with self._guard(session, 'create permission'):
            self._assert_permission_name_free(session, payload.name)
            perm = authz.Permission(name=payload.name, guard_name=payload.guard_name)
            session.add(perm)
            self._commit(session)
            return _to_permission(perm)

    def update_permission(self, permission_id: int, payload: PermissionPayload) -> Permission:
        session = self._session()
        with self._guard(session, 'update permission'):
            perm = self._get_permission(session, permission_id)
            self._assert_permission_name_free(session, payload.name, exclude_id=perm.id)
            perm.name = payload.name
            perm.guard_name = payload.guard_name
            self._commit(session)
            return _to_permission(perm)

    def delete_permission(self, permission_id: int) -> None:
        session = self._session()
        with self._guard(session, 'delete permission'):
            session.delete(self._get_permission(session, permission_id))
            self._commit(session)

    def _commit(self, session):
        session.commit()
        # sessions keep loaded state across commits; reload relationships on next access
        session.expire_all()


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and 'data' in body:
        return body['data']
    return body


class HttpRoleGateway:
    """Remote back office API client. Timeouts are owned here, not by the editor."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._http = session or requests.Session()
        self._http.headers.setdefault('Accept', 'application/json')
        if token:
            self._http.headers['Authorization'] = f'Bearer {token}'

    def _request(self, method: str, path: str, json: Optional[dict] = None):
        url = f'{self.base_url}{path}'
        try:
            resp = self._http.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('%s %s failed: %s', method, url, e)
            raise GatewayError(f'{method} {path} failed: {e}') from e
        if resp.status_code >= 400:
            raise self._error_for(resp, method, path)
        if not resp.content:
            return None
        try:
            return _unwrap(resp.json())
        except ValueError as e:
            raise GatewayError(f'{method} {path} returned invalid JSON') from e

    def _error_for(self, resp, method: str, path: str) -> Exception:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        message = body.get('message') if isinstance(body, dict) else None
        message = message or f'{method} {path} returned {resp.status_code}'
        if resp.status_code == 404:
            return NotFoundError(path)
        if resp.status_code == 409:
            return ConflictError(message)
        if resp.status_code in (400, 422) and isinstance(body, dict) and isinstance(body.get('errors'), dict):
            # {"errors": {"name": ["The name has already been taken."]}}
            fields = {k: v[0] if isinstance(v, list) and v else str(v) for k, v in body['errors'].items()}
            if 'taken' in str(fields.get('name', '')):
                return ConflictError(fields['name'])
            return ValidationError(fields)
        return GatewayError(message)

    def _parse(self, factory, body, method: str, path: str):
        try:
            return factory(body)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning('%s %s returned a malformed record: %r', method, path, body)
            raise GatewayError(f'{method} {path} returned a malformed record: {e!r}') from e

    def fetch_permissions(self) -> List[Permission]:
        rows = self._request('GET', '/api/permissions') or []
        return self._parse(lambda data: [Permission.from_dict(r) for r in data], rows, 'GET', '/api/permissions')

    def fetch_role(self, role_id: int) -> Role:
        path = f'/api/roles/{role_id}'
        return self._parse(Role.from_dict, self._request('GET', path), 'GET', path)

    def create_role(self, payload: RolePayload) -> Role:
        return self._parse(Role.from_dict, self._request('POST', '/api/roles', json=payload.to_dict()), 'POST', '/api/roles')

    def update_role(self, role_id: int, payload: RolePayload) -> Role:
        path = f'/api/roles/{role_id}'
        return self._parse(Role.from_dict, self._request('PUT', path, json=payload.to_dict()), 'PUT', path)

    def create_permission(self, payload: PermissionPayload) -> Permission:
        body = self._request('POST', '/api/permissions', json=payload.to_dict())
        return self._parse(Permission.from_dict, body, 'POST', '/api/permissions')

    def update_permission(self, permission_id: int, payload: PermissionPayload) -> Permission:
        path = f'/api/permissions/{permission_id}'
        return self._parse(Permission.from_dict, self._request('PUT', path, json=payload.to_dict()), 'PUT', path)


__all__ = ['RoleGateway', 'SqlRoleGateway', 'HttpRoleGateway']
