from backoffice.errors import (
    ConflictError, DuplicateIdentifierError, GatewayError, NotFoundError, UnresolvedPermissionName,
)


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert 'error' in body
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_internal_error_shape(client, monkeypatch):
    import backoffice.routes.iam as iam_mod

    class BoomGateway:
        def list_roles(self):
            raise RuntimeError('explode')

    monkeypatch.setattr(iam_mod, '_gateway', lambda: BoomGateway())
    resp = client.get('/iam/roles')
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'
    assert 'explode' not in body['error']['detail']


def test_gateway_error_maps_to_bad_gateway(client, monkeypatch):
    import backoffice.routes.iam as iam_mod

    class DownGateway:
        def fetch_permissions(self):
            raise GatewayError('database unavailable')

    monkeypatch.setattr(iam_mod, '_gateway', lambda: DownGateway())
    resp = client.get('/iam/permissions')
    assert resp.status_code == 502
    assert resp.get_json()['error']['detail'] == 'database unavailable'


def test_error_messages():
    assert str(NotFoundError('Role', 3)) == 'Role 3 not found'
    assert str(NotFoundError('/api/roles/3')) == '/api/roles/3 not found'
    assert str(UnresolvedPermissionName('delete_users', 7)) == "Unknown permission name 'delete_users' on role 7"
    assert str(DuplicateIdentifierError(4, ['a', 'b'])) == 'Duplicate permission id 4: a, b'
    assert issubclass(ConflictError, GatewayError)
    assert issubclass(NotFoundError, GatewayError)


def test_illegal_transition_is_internal_error(client, monkeypatch):
    import backoffice.routes.iam as iam_mod
    from backoffice.errors import IllegalTransition

    class MisusedGateway:
        def list_roles(self):
            raise IllegalTransition('Invalid editor state transition IDLE -> READY')

    monkeypatch.setattr(iam_mod, '_gateway', lambda: MisusedGateway())
    resp = client.get('/iam/roles')
    assert resp.status_code == 500
    assert resp.get_json()['error']['title'] == 'Internal Server Error'


def test_duplicate_identifier_is_internal_error(client, monkeypatch):
    import backoffice.routes.iam as iam_mod

    class CorruptGateway:
        def fetch_permissions(self):
            raise DuplicateIdentifierError(1, ['view_users', 'edit_users'])

    monkeypatch.setattr(iam_mod, '_gateway', lambda: CorruptGateway())
    assert client.get('/iam/permissions/groups').status_code == 500
