import pytest

from db import get_session, get_inventory_session
from main import create_app
from tests import factories


@pytest.fixture
def app(tmp_path):
    """Application bound to throwaway SQLite files for both stores."""
    app = create_app(
        db_url=f"sqlite:///{tmp_path / 'patdb.sqlite'}",
        inventory_url=f"sqlite:///{tmp_path / 'inventory.sqlite'}",
    )
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture
def session(app):
    s = get_session()
    factories.PATRecordFactory._meta.sqlalchemy_session = s
    yield s
    s.close()


@pytest.fixture
def inventory_session(app):
    s = get_inventory_session()
    factories.AssetFactory._meta.sqlalchemy_session = s
    factories.PATTestFactory._meta.sqlalchemy_session = s
    yield s
    s.close()
