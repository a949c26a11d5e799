from __future__ import annotations
"""Role editor session: loads the catalog, seeds the selection from an existing role,
validates the form and submits the role back through a gateway.

States:
    IDLE -> LOADING_CATALOG -> LOADING_ROLE (edit only) -> READY -> SUBMITTING -> DONE
                 |                  |                                  |
                 +------------------+------------> FAILED <------------+

The catalog must be loaded before any name -> id resolution; the role fetch only starts
once the catalog index exists. FAILED keeps the state it came from so ``retry`` can
re-enter it. Every fetch is tagged with the session that started it; a result that
arrives after ``close`` (or after a newer ``open``) is discarded instead of touching
the disposed selection.
"""
import logging
import uuid
from enum import Enum
from typing import Dict, List, Optional

from backoffice.constants.permissions import ALLOWED_GUARD_NAMES, DEFAULT_GUARD_NAME
from backoffice.errors import (
    ConflictError, DuplicateIdentifierError, GatewayError, IllegalTransition,
    UnresolvedPermissionName, ValidationError,
)
from backoffice.services.bridge import ids_to_names, names_to_ids
from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.gateways import RoleGateway
from backoffice.services.grouping import find_category, group
from backoffice.services.records import CategoryState, PermissionCategory, Role, RolePayload
from backoffice.services.selection import SelectionModel
from backoffice.utils.fsm import TransitionValidator
from backoffice.utils.validation import validate_role_fields

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = 'IDLE'
    LOADING_CATALOG = 'LOADING_CATALOG'
    LOADING_ROLE = 'LOADING_ROLE'
    READY = 'READY'
    SUBMITTING = 'SUBMITTING'
    DONE = 'DONE'
    FAILED = 'FAILED'


EDITOR_FSM = TransitionValidator({
    EditorState.IDLE: {EditorState.LOADING_CATALOG},
    EditorState.LOADING_CATALOG: {EditorState.LOADING_ROLE, EditorState.READY, EditorState.FAILED},
    EditorState.LOADING_ROLE: {EditorState.READY, EditorState.FAILED},
    EditorState.READY: {EditorState.SUBMITTING},
    EditorState.SUBMITTING: {EditorState.DONE, EditorState.READY, EditorState.FAILED},
    EditorState.DONE: set(),
    EditorState.FAILED: {EditorState.LOADING_CATALOG, EditorState.LOADING_ROLE, EditorState.SUBMITTING},
}, field_name='editor state')

RETRYABLE = (GatewayError, DuplicateIdentifierError)


class EditorSession:
    """Identity of one open editor; the stale-response guard compares against it."""

    def __init__(self, role_id: Optional[int] = None):
        self.token = uuid.uuid4().hex
        self.role_id = role_id

    def __repr__(self):
        return f'<EditorSession {self.token[:8]} role={self.role_id}>'


class RoleEditor:
    def __init__(self, gateway: RoleGateway, *, strict_names: bool = False,
                 default_guard: str = DEFAULT_GUARD_NAME, allowed_guards=ALLOWED_GUARD_NAMES):
        self.gateway = gateway
        self.strict_names = strict_names
        self.default_guard = default_guard
        self.allowed_guards = tuple(allowed_guards)
        self._reset()

    def _reset(self):
        self.state = EditorState.IDLE
        self.session: Optional[EditorSession] = None
        self.catalog: Optional[PermissionCatalogIndex] = None
        self.categories: List[PermissionCategory] = []
        self.selection: Optional[SelectionModel] = None
        self.role: Optional[Role] = None
        self.result: Optional[Role] = None
        self.name = ''
        self.guard_name = self.default_guard
        self.error: Optional[Exception] = None
        self.failed_from: Optional[EditorState] = None
        self.field_errors: Dict[str, str] = {}
        self.warnings: List[UnresolvedPermissionName] = []

    # ------------------------------------------------------------------ lifecycle
    @property
    def is_edit(self) -> bool:
        return self.session is not None and self.session.role_id is not None

    def open(self, role_id: Optional[int] = None) -> EditorState:
        if self.session is not None:
            self.close()
        session = EditorSession(role_id)
        self.session = session
        logger.debug('Opening role editor %r', session)
        self._enter(EditorState.LOADING_CATALOG)
        self._run(session, EditorState.LOADING_CATALOG)
        return self.state

    def close(self) -> None:
        if self.session is not None:
            logger.debug('Closing role editor %r in state %s', self.session, self.state.value)
        self._reset()

    def retry(self) -> EditorState:
        if self.state is not EditorState.FAILED:
            raise IllegalTransition(f'retry requires FAILED state, editor is {self.state.value}')
        origin = self.failed_from
        session = self.session
        self._enter(origin)
        self.error = None
        self.failed_from = None
        if origin is EditorState.SUBMITTING:
            self._submit(session)
        else:
            self._run(session, origin)
        return self.state

    # ------------------------------------------------------------------ loading
    def _run(self, session: EditorSession, start: EditorState):
        if start is EditorState.LOADING_CATALOG:
            if not self._load_catalog(session):
                return
            if session.role_id is None:
                self._enter(EditorState.READY)
                return
            self._enter(EditorState.LOADING_ROLE)
        if self._load_role(session):
            self._enter(EditorState.READY)

    def _load_catalog(self, session: EditorSession) -> bool:
        try:
            permissions = self.gateway.fetch_permissions()
            if not self._is_current(session, 'catalog'):
                return False
            catalog = PermissionCatalogIndex(permissions)
        except RETRYABLE as e:
            if self._is_current(session, 'catalog failure'):
                self._fail(e)
            return False
        self.catalog = catalog
        self.categories = group(catalog)
        self.selection = SelectionModel(catalog)
        return True

    def _load_role(self, session: EditorSession) -> bool:
        try:
            role = self.gateway.fetch_role(session.role_id)
        except RETRYABLE as e:
            if self._is_current(session, 'role failure'):
                self._fail(e)
            return False
        if not self._is_current(session, 'role'):
            return False
        ids, unresolved = names_to_ids(role.permission_names, self.catalog)
        self.warnings = [UnresolvedPermissionName(n, role.id) for n in unresolved]
        for w in self.warnings:
            logger.warning('Role %s (%s) references permission missing from catalog: %s', role.id, role.name, w.name)
        self.role = role
        self.name = role.name
        self.guard_name = role.guard_name or self.default_guard
        self.selection = SelectionModel(self.catalog, ids)
        return True

    def _is_current(self, session: EditorSession, what: str) -> bool:
        if self.session is session:
            return True
        logger.debug('Discarding stale %s response for %r', what, session)
        return False

    # ------------------------------------------------------------------ editing
    def _require_ready(self) -> SelectionModel:
        if self.state is not EditorState.READY:
            raise IllegalTransition(f'editor is not ready ({self.state.value})')
        return self.selection

    def _category(self, key: str) -> PermissionCategory:
        cat = find_category(self.categories, key)
        if cat is None:
            raise KeyError(key)
        return cat

    def toggle(self, permission_id: int) -> None:
        self._require_ready().toggle(permission_id)

    def select_category(self, key: str, checked: bool) -> None:
        self._require_ready().select_category(self._category(key), checked)

    def clear_all(self) -> None:
        self._require_ready().clear_all()

    def _require_selection(self) -> SelectionModel:
        if self.selection is None:
            raise IllegalTransition(f'no selection loaded ({self.state.value})')
        return self.selection

    def category_state(self, key: str) -> CategoryState:
        return self._require_selection().category_state(self._category(key))

    def set_name(self, name: str) -> None:
        self._require_ready()
        self.name = name
        self.field_errors.pop('name', None)

    def set_guard_name(self, guard_name: str) -> None:
        self._require_ready()
        self.guard_name = guard_name
        self.field_errors.pop('guard_name', None)

    @property
    def selected_ids(self) -> frozenset:
        return self.selection.selected_ids if self.selection else frozenset()

    @property
    def unresolved_names(self) -> List[str]:
        return [w.name for w in self.warnings]

    def snapshot(self) -> List[dict]:
        """Per-category rows for rendering: key, label, tri-state and counts."""
        selection = self._require_selection()
        rows = []
        for cat in self.categories:
            selected, total = selection.category_counts(cat)
            rows.append({
                'key': cat.key,
                'display_name': cat.display_name,
                'access': cat.access,
                'state': selection.category_state(cat).value,
                'selected': selected,
                'total': total,
                'permissions': [
                    {'id': p.id, 'name': p.name, 'selected': selection.is_selected(p.id)}
                    for p in self.catalog if p.id in cat.member_ids
                ],
            })
        return rows

    def acknowledge_unresolved(self) -> List[str]:
        """Accept that names missing from the catalog are dropped on save; returns the dropped names."""
        self._require_ready()
        dropped = self.unresolved_names
        if dropped:
            logger.info('Dropping unresolved permissions from role %s: %s', self.role.id if self.role else None, ', '.join(dropped))
        self.warnings = []
        self.field_errors.pop('permissions', None)
        return dropped

    # ------------------------------------------------------------------ submit
    def validate(self) -> Dict[str, str]:
        errors = validate_role_fields(self.name, self.guard_name, self.allowed_guards)
        if self.strict_names and self.warnings:
            errors['permissions'] = (
                'Role references permissions missing from the catalog: ' + ', '.join(self.unresolved_names)
                + '. Acknowledge to drop them, or add them to the catalog and reopen'
            )
        return errors

    def submit(self) -> EditorState:
        self._require_ready()
        self.field_errors = self.validate()
        if self.field_errors:
            logger.debug('Role editor validation failed: %s', self.field_errors)
            return self.state
        self._enter(EditorState.SUBMITTING)
        self._submit(self.session)
        return self.state

    def payload(self) -> RolePayload:
        return RolePayload(
            name=self.name,
            guard_name=self.guard_name,
            permission_names=tuple(ids_to_names(self.selection.selected_ids, self.catalog)),
        )

    def _submit(self, session: EditorSession):
        payload = self.payload()
        try:
            if session.role_id is None:
                saved = self.gateway.create_role(payload)
            else:
                saved = self.gateway.update_role(session.role_id, payload)
        except ValidationError as e:
            if self._is_current(session, 'submit rejection'):
                self.field_errors = e.field_errors
                self._enter(EditorState.READY)
            return
        except ConflictError as e:
            if self._is_current(session, 'submit conflict'):
                self.field_errors = {'name': str(e)}
                self._enter(EditorState.READY)
            return
        except GatewayError as e:
            if self._is_current(session, 'submit failure'):
                self._fail(e)
            return
        if not self._is_current(session, 'submit'):
            return
        self.result = saved
        self.selection = None
        self._enter(EditorState.DONE)

    # ------------------------------------------------------------------ state helpers
    def _enter(self, target: EditorState):
        EDITOR_FSM.assert_can_transition(self.state, target)
        logger.debug('Role editor %s -> %s', self.state.value, target.value)
        self.state = target

    def _fail(self, error: Exception):
        logger.warning('Role editor failed while %s: %s', self.state.value, error)
        origin = self.state
        self._enter(EditorState.FAILED)
        self.failed_from = origin
        self.error = error


__all__ = ['RoleEditor', 'EditorState', 'EditorSession', 'EDITOR_FSM']
