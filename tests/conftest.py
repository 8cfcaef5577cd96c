import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault('APP_ENV', 'testing')

from medicare.config import TestingConfig
from medicare.services.auth import AuthResult
from medicare.services.errors import ServiceError
from medicare.services.records import MedicineRecord, UserRecord
from medicare.services.storage import MemoryStorage
from medicare.version import API_PREFIX

MEDICINES = [
    {"id": 1, "name": "Paracetamol 500mg", "generic_name": "Acetaminophen", "price": 25.00,
     "stock_quantity": 100, "category": "Pain Relief", "manufacturer": "Acme Pharma",
     "dosage_form": "Tablet", "strength": "500mg"},
    {"id": 2, "name": "Amoxicillin 250mg", "generic_name": "Amoxicillin", "price": 120.50,
     "stock_quantity": 10, "prescription_required": True, "category": "Antibiotics",
     "dosage_form": "Capsule", "strength": "250mg"},
    {"id": 3, "name": "Cough Syrup", "price": 85, "stock_quantity": 0, "category": "Cold & Flu"},
]

USER = {
    "id": 7,
    "firstName": "Asha",
    "lastName": "Rao",
    "email": "asha@example.com",
    "phone": 9876543210,
    "address": "12 MG Road",
    "city": "Pune",
    "pincode": 411001,
}

PASSWORD = "secret1"


class FakeCatalog:
    def __init__(self, medicines=None):
        self.medicines = [MedicineRecord.model_validate(m) for m in (medicines or MEDICINES)]
        self.calls = []
        self.fail = None

    def _check(self):
        if self.fail is not None:
            raise self.fail

    def list_medicines(self):
        self.calls.append(("list", None))
        self._check()
        return list(self.medicines)

    def search(self, query):
        self.calls.append(("search", query))
        self._check()
        q = query.lower()
        return [m for m in self.medicines if q in m.name.lower() or q in (m.generic_name or "").lower()]

    def get_by_id(self, medicine_id):
        self.calls.append(("get", medicine_id))
        self._check()
        for m in self.medicines:
            if str(m.medicine_id) == str(medicine_id):
                return m
        raise ServiceError("Medicine not found", status=404)


class FakeAuth:
    def __init__(self, token="opaque-token", user=None):
        self.token = token
        self.user = user or USER
        self.registered = []
        self.on_login = None

    def login(self, email, password):
        if self.on_login:
            self.on_login()
        if email != self.user["email"] or password != PASSWORD:
            raise ServiceError("Invalid email or password", status=401)
        return AuthResult(token=self.token, user=UserRecord.model_validate(self.user))

    def register(self, fields):
        if fields["email"] == self.user["email"]:
            raise ServiceError("Email already registered", status=400)
        self.registered.append(fields)
        return 42


class FakeNotifier:
    def __init__(self, grant=True):
        self.grant = grant
        self.asked = 0
        self.alerts = []

    def request_permission(self):
        self.asked += 1
        return self.grant

    def alert(self, reminder, fire_at):
        self.alerts.append((reminder.medicine_name, fire_at))


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def catalog():
    return FakeCatalog()


@pytest.fixture()
def auth():
    return FakeAuth()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def app(storage, catalog, auth, notifier):
    from medicare import create_app
    return create_app(TestingConfig, storage=storage, catalog=catalog, auth=auth, notifier=notifier)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def logged_in_client(client):
    resp = client.post(f"{API_PREFIX}/session/login", json={"email": USER["email"], "password": PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture()
def storefront(app):
    from medicare.services.storefront import current_storefront
    with app.app_context():
        yield current_storefront()
