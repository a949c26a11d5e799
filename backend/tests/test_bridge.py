from backoffice.services.bridge import names_to_ids, ids_to_names
from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.grouping import group, find_category
from backoffice.services.records import CategoryState, Permission
from backoffice.services.selection import SelectionModel


def test_round_trip_happy_path(sample_catalog):
    idx = PermissionCatalogIndex(sample_catalog)
    names = ['manage_settings', 'view_users', 'delete_products']
    ids, unresolved = names_to_ids(names, idx)
    assert unresolved == []
    assert set(ids_to_names(ids, idx)) == set(names)


def test_round_trip_degraded_path(sample_catalog):
    idx = PermissionCatalogIndex(sample_catalog)
    ids, unresolved = names_to_ids(['view_users', 'delete_users', 'delete_users'], idx)
    assert ids == {1}
    assert unresolved == ['delete_users']
    assert 'delete_users' not in ids_to_names(ids, idx)


def test_ids_to_names_uses_catalog_order_and_drops_unknown(sample_catalog):
    idx = PermissionCatalogIndex(sample_catalog)
    assert ids_to_names([5, 1, 3, 404], idx) == ['view_users', 'view_products', 'manage_settings']
    assert ids_to_names([], idx) == []


def test_scenario_partial_view_category():
    idx = PermissionCatalogIndex([Permission(1, 'view_users'), Permission(2, 'edit_users'), Permission(3, 'view_products')])
    ids, unresolved = names_to_ids(['view_users', 'delete_users'], idx)
    assert ids == {1}
    assert unresolved == ['delete_users']
    view = find_category(group(idx), 'view')
    assert view.member_ids == frozenset({1, 3})
    assert SelectionModel(idx, ids).category_state(view) is CategoryState.PARTIAL
