import pytest
from flask import jsonify
from flask_jwt_extended import create_access_token
from fuelstation import create_app
from fuelstation.config import TestConfig
from fuelstation.extensions import db
from fuelstation.models import User, Station
from fuelstation.routes.route_table import DashboardHandlers
from fuelstation.seed import seed_roles, get_role_id

ROLE_USERS = {
    "admin": "admin",
    "manager": "manager",
    "accountant": "accountant",
    "employee": "cashier",
}


class RecordingHandlers:
    """Stand-in dashboard handlers that remember every call they receive."""

    def __init__(self):
        self.calls = []

    def _handler(self, name):
        def handler():
            self.calls.append(name)
            return jsonify({"handler": name}), 200
        return handler

    def bundle(self):
        return DashboardHandlers(**{name: self._handler(name) for name in DashboardHandlers._fields})


def _build_app(tmp_path, dashboard_handlers=None):
    class Config(TestConfig):
        AUDIT_LOG_FILE = str(tmp_path / "audit.log")

    return create_app(Config, dashboard_handlers=dashboard_handlers)


@pytest.fixture
def recorder():
    return RecordingHandlers()


@pytest.fixture
def app(tmp_path):
    app = _build_app(tmp_path)
    with app.app_context():
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def stub_app(tmp_path, recorder):
    app = _build_app(tmp_path, dashboard_handlers=recorder.bundle())
    with app.app_context():
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def stub_client(stub_app):
    return stub_app.test_client()


@pytest.fixture
def station(app_with_db):
    station = Station(code="ST-TEST", name="Test Station")
    db.session.add(station)
    db.session.commit()
    return station


@pytest.fixture
def app_with_db(request):
    # Whichever application the test asked for.
    if "stub_app" in request.fixturenames:
        return request.getfixturevalue("stub_app")
    return request.getfixturevalue("app")


@pytest.fixture
def users(app_with_db):
    created = {}
    for role_name, username in ROLE_USERS.items():
        user = User(username=username, role_id=get_role_id(role_name))
        user.set_password("secret-pass")
        db.session.add(user)
        created[role_name] = user
    db.session.commit()
    return created


@pytest.fixture
def auth_headers(users):
    def make(role="admin"):
        token = create_access_token(identity=str(users[role].id))
        return {"x-auth-token": token}
    return make
