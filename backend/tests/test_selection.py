from backoffice.services.catalog import PermissionCatalogIndex
from backoffice.services.grouping import group, find_category
from backoffice.services.records import CategoryState, Permission, PermissionCategory
from backoffice.services.selection import SelectionModel


def _model(initial=()):
    catalog = PermissionCatalogIndex([Permission(1, 'view_users'), Permission(2, 'view_orders'), Permission(3, 'view_products'), Permission(4, 'edit_users')])
    return SelectionModel(catalog, initial), group(catalog)


def test_tri_state():
    model, cats = _model()
    view = find_category(cats, 'view')
    assert model.category_state(view) is CategoryState.EMPTY
    model.toggle(1)
    assert model.category_state(view) is CategoryState.PARTIAL
    model.select_category(view, True)
    assert model.category_state(view) is CategoryState.FULL
    assert model.category_counts(view) == (3, 3)


def test_initial_selection_is_filtered_to_catalog():
    model, _ = _model([1, 4, 77])
    assert model.selected_ids == frozenset({1, 4})
    assert model.count == 2


def test_toggle_flips_and_ignores_unknown_ids():
    model, _ = _model()
    model.toggle(2)
    assert model.is_selected(2)
    model.toggle(2)
    assert not model.is_selected(2)
    model.toggle(999)
    assert model.selected_ids == frozenset()


def test_select_category_is_idempotent():
    model, cats = _model([4])
    view = find_category(cats, 'view')
    model.select_category(view, True)
    once = model.selected_ids
    model.select_category(view, True)
    assert model.selected_ids == once == frozenset({1, 2, 3, 4})


def test_unselect_category_leaves_other_categories():
    model, cats = _model([1, 2, 4])
    model.select_category(find_category(cats, 'view'), False)
    assert model.selected_ids == frozenset({4})


def test_select_category_never_adds_ids_outside_catalog():
    model, _ = _model()
    rogue = PermissionCategory('view', 'View', frozenset({1, 50}))
    model.select_category(rogue, True)
    assert model.selected_ids == frozenset({1})


def test_clear_all_and_empty_category():
    model, cats = _model([1, 2, 3, 4])
    model.clear_all()
    assert model.count == 0
    empty = PermissionCategory('none', 'None')
    assert model.category_state(empty) is CategoryState.EMPTY
    assert model.category_counts(empty) == (0, 0)
