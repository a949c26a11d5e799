import os, sys, pytest
# Ensure backend directory is on path so 'backoffice' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import backoffice
from backoffice import create_app, get_db
from backoffice.models.authz import Base
from backoffice.services.records import Permission

@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app()
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app

@pytest.fixture(autouse=True)
def clean_db(app_instance):
    yield
    session = get_db()
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    # drop identity map so reused primary keys do not collide with stale objects
    backoffice.SessionLocal.remove()

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()

@pytest.fixture()
def sample_catalog():
    return [
        Permission(1, 'view_users'),
        Permission(2, 'edit_users'),
        Permission(3, 'view_products'),
        Permission(4, 'delete_products'),
        Permission(5, 'manage_settings'),
    ]
