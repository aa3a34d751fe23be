import os
import threading
import pytest
from typing import Any, Dict, Generator, List, Optional, Tuple
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

# Pas de Redis en tests: le lifespan n'initialise pas FastAPILimiter
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from shop_backend.app import app as fastapi_app
from shop_backend.cart.models import CartLine, owner_column
from shop_backend.payments.errors import DuplicateOrder, SessionNotFound

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Aucun test ne doit joindre un vrai projet Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("shop_backend.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("shop_backend.infra.supabase_client.get_service_supabase", lambda: MagicMock())


def make_cart_row(product_id="p1", name="Tenis", brand="Acme", price=100, quantity=1, size=None, images=None) -> Dict[str, Any]:
    """Ligne 'cart' telle que renvoyée par la jointure PostgREST product:product_id(...)."""
    return {
        "quantity": quantity,
        "size": size,
        "product": {
            "id": product_id,
            "name": name,
            "brand": brand,
            "price": price,
            "image_urls": images if images is not None else [],
        },
    }


class FakeLedger:
    """
    Registre 'orders' en mémoire avec index unique sur stripe_session_id.
    Le verrou ne protège que la structure interne (comme l'index côté Postgres);
    le service, lui, n'en voit aucun.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.rows: List[Dict[str, Any]] = []
        self._by_session: Dict[str, Dict[str, Any]] = {}
        self.insert_attempts = 0

    def find_by_stripe_session_id(self, stripe_session_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._by_session.get(stripe_session_id)
            return {"id": row["id"], "stripe_session_id": stripe_session_id, "status": row["status"]} if row else None

    def insert_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self.insert_attempts += 1
            sid = order["stripe_session_id"]
            if sid in self._by_session:
                raise DuplicateOrder(sid)
            row = dict(order, id=f"ord_{len(self.rows) + 1}")
            self.rows.append(row)
            self._by_session[sid] = row
            return row


class FakeCart:
    """Table 'cart' en mémoire, indexée par (owner_kind, owner_id)."""

    def __init__(self):
        self._lock = threading.Lock()
        self.rows: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        self.delete_calls = 0

    def add(self, owner_kind: str, owner_id: str, row: Dict[str, Any]) -> None:
        owner_column(owner_kind)
        self.rows.setdefault((owner_kind, owner_id), []).append(row)

    def read_raw_lines(self, owner_kind: str, owner_id: str, select: str = "*") -> List[Dict[str, Any]]:
        with self._lock:
            return list(self.rows.get((owner_kind, owner_id), []))

    def read_lines(self, owner_kind: str, owner_id: str) -> List[CartLine]:
        return [CartLine.from_row(owner_kind, owner_id, r) for r in self.read_raw_lines(owner_kind, owner_id)]

    def delete_lines(self, owner_kind: str, owner_id: str) -> None:
        with self._lock:
            self.delete_calls += 1
            self.rows.pop((owner_kind, owner_id), None)


class FakeStripe:
    """Sessions Checkout en mémoire; create_session enregistre les paramètres reçus."""

    def __init__(self):
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.created: List[Dict[str, Any]] = []

    def create_session(self, **kwargs) -> Dict[str, Any]:
        sid = f"cs_test_{len(self.created) + 1}"
        self.created.append(kwargs)
        self.sessions[sid] = {
            "id": sid,
            "payment_status": "unpaid",
            "currency": kwargs["line_items"][0]["price_data"]["currency"] if kwargs.get("line_items") else None,
            "metadata": dict(kwargs.get("metadata") or {}),
        }
        return {"id": sid, "url": f"https://checkout.stripe.test/c/pay/{sid}"}

    def pay(self, session_id: str, **extra: Any) -> Dict[str, Any]:
        session = self.sessions[session_id]
        session["payment_status"] = "paid"
        session.update(extra)
        return session

    def get_session(self, session_id: str) -> Dict[str, Any]:
        if session_id not in self.sessions:
            raise SessionNotFound("Session Stripe introuvable", session_id=session_id)
        return dict(self.sessions[session_id])


@pytest.fixture
def fake_ledger(monkeypatch) -> FakeLedger:
    ledger = FakeLedger()
    monkeypatch.setattr("shop_backend.payments.service.orders_repository.find_by_stripe_session_id", ledger.find_by_stripe_session_id)
    monkeypatch.setattr("shop_backend.payments.service.orders_repository.insert_order", ledger.insert_order)
    return ledger

@pytest.fixture
def fake_cart(monkeypatch) -> FakeCart:
    cart = FakeCart()
    monkeypatch.setattr("shop_backend.payments.service.cart_repository.read_lines", cart.read_lines)
    monkeypatch.setattr("shop_backend.payments.service.cart_repository.read_raw_lines", cart.read_raw_lines)
    monkeypatch.setattr("shop_backend.payments.service.cart_repository.delete_lines", cart.delete_lines)
    return cart

@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    gateway = FakeStripe()
    monkeypatch.setattr("shop_backend.payments.service.stripe_client.create_session", gateway.create_session)
    monkeypatch.setattr("shop_backend.payments.service.stripe_client.get_session", gateway.get_session)
    return gateway

@pytest.fixture
def cart_row():
    return make_cart_row
