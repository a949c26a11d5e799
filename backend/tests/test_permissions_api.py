from test_utils_seed import ensure_permissions


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}


def test_create_permission_defaults_guard(client):
    resp = client.post('/iam/permissions', json={'name': 'view_reports'})
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body['message'] == 'Permission created successfully'
    data = body['data']
    assert data['name'] == 'view_reports'
    assert data['guard_name'] == 'web'
    assert data['category'] == 'read'
    assert data['scope'] == 'general'
    assert data['display_name'] == 'View Reports'


def test_create_permission_validation(client):
    resp = client.post('/iam/permissions', json={'name': 'AB', 'guard_name': 'cli'})
    assert resp.status_code == 400
    fields = resp.get_json()['error']['fields']
    assert fields['name'] == 'Permission name should contain only lowercase letters and underscores'
    assert fields['guard_name'] == 'Guard name must be one of: web, api'


def test_create_permission_duplicate_name_conflicts(client):
    ensure_permissions(['view_users'])
    resp = client.post('/iam/permissions', json={'name': 'view_users'})
    assert resp.status_code == 409
    assert resp.get_json()['error']['title'] == 'Conflict'


def test_list_search_and_pagination(client):
    ensure_permissions(['view_users', 'edit_users', 'view_products', 'delete_orders'])
    resp = client.get('/iam/permissions?limit=2&offset=1')
    body = resp.get_json()
    assert [r['name'] for r in body['data']] == ['edit_users', 'view_products']
    assert body['pagination'] == {'total': 4, 'limit': 2, 'offset': 1, 'returned': 2}
    found = client.get('/iam/permissions?search=users').get_json()
    assert [r['name'] for r in found['data']] == ['view_users', 'edit_users']
    bad = client.get('/iam/permissions?limit=abc')
    assert bad.status_code == 400


def test_stats_and_groups(client):
    ensure_permissions(['view_users', 'edit_users', 'view_products', 'manage_settings'])
    assert client.get('/iam/permissions/stats').get_json() == {'total': 4, 'read': 2, 'write': 1, 'delete': 0, 'admin': 1}
    groups = client.get('/iam/permissions/groups').get_json()['data']
    assert [g['key'] for g in groups] == ['view', 'edit', 'manage']
    assert [p['name'] for p in groups[0]['permissions']] == ['view_users', 'view_products']
    assert groups[2]['access'] == 'admin'


def test_export_csv(client):
    assert client.get('/iam/permissions/export.csv').status_code == 404
    ensure_permissions(['view_users'])
    resp = client.get('/iam/permissions/export.csv')
    assert resp.status_code == 200
    assert resp.mimetype == 'text/csv'
    assert 'attachment; filename=permissions_export_' in resp.headers['Content-Disposition']
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0] == 'ID,Name,Display Name,Category,Scope,Guard Name'
    assert lines[1].endswith(',view_users,View Users,read,users,web')


def test_update_and_delete_permission(client):
    perms = ensure_permissions(['view_reports', 'manage_users'])
    pid = perms['view_reports'].id
    resp = client.put(f'/iam/permissions/{pid}', json={'name': 'export_reports', 'guard_name': 'api'})
    assert resp.status_code == 200
    assert resp.get_json()['data']['name'] == 'export_reports'
    assert client.get(f'/iam/permissions/{pid}').get_json()['guard_name'] == 'api'

    sys_id = perms['manage_users'].id
    assert client.put(f'/iam/permissions/{sys_id}', json={'name': 'manage_people'}).status_code == 403
    assert client.delete(f'/iam/permissions/{sys_id}').status_code == 403

    assert client.delete(f'/iam/permissions/{pid}').get_json() == {'message': 'Permission deleted successfully'}
    assert client.get(f'/iam/permissions/{pid}').status_code == 404
