from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.grouping import group, group_key, find_category
from backoffice.services.records import Permission


def test_groups_by_action_prefix_in_first_seen_order(sample_catalog):
    cats = group(PermissionCatalogIndex(sample_catalog))
    assert [c.key for c in cats] == ['view', 'edit', 'delete', 'manage']
    view = find_category(cats, 'view')
    assert view.member_ids == frozenset({1, 3})
    assert view.display_name == 'View'
    assert view.access == 'read'
    assert find_category(cats, 'manage').access == 'admin'


def test_grouping_is_stable_across_calls(sample_catalog):
    first = group(sample_catalog)
    second = group(sample_catalog)
    assert first == second


def test_single_segment_names_fall_into_general():
    perms = [Permission(1, 'superuser'), Permission(2, 'view_users'), Permission(3, 'audit')]
    cats = group(perms)
    assert [c.key for c in cats] == ['general', 'view']
    general = find_category(cats, 'general')
    assert general.member_ids == frozenset({1, 3})
    assert general.display_name == 'General'
    assert group_key('audit') == 'general'


def test_unknown_prefix_keeps_its_own_group():
    cats = group([Permission(1, 'export_orders'), Permission(2, 'export_users')])
    assert len(cats) == 1
    assert cats[0].key == 'export'
    assert cats[0].access == 'general'


def test_every_permission_in_exactly_one_group(sample_catalog):
    cats = group(sample_catalog)
    seen = [pid for c in cats for pid in c.member_ids]
    assert sorted(seen) == [1, 2, 3, 4, 5]
    assert find_category(cats, 'missing') is None
