from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from meatshop.application.container import build_services
from meatshop.domain import models  # noqa: F401  (registers tables)
from meatshop.domain.models import Product, User
from meatshop.infrastructure.database import Base
from meatshop.infrastructure.idempotency_store import IdempotencyStore
from meatshop.infrastructure.media_storage import LocalObjectStorage
from meatshop.interfaces.INotifier import INotifier
from meatshop.main import create_app

ADMIN = {"username": "admin", "password": "admin-pass"}
CUSTOMER = {"username": "bat", "password": "bat-pass"}
OTHER_CUSTOMER = {"username": "dorj", "password": "dorj-pass"}


class RecordingNotifier(INotifier):
    def __init__(self):
        self.sent = []

    def notify_admin_new_order(self, order):
        self.sent.append(order)
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def idempotency():
    return IdempotencyStore(redis_url=None, ttl=60)


@pytest.fixture
def object_storage(tmp_path):
    return LocalObjectStorage(root=str(tmp_path / "uploads"), url_prefix="/uploads")


@pytest.fixture
def services(session_factory, notifier, idempotency, object_storage):
    return build_services(
        session_factory,
        idempotency=idempotency,
        notifier=notifier,
        object_storage=object_storage,
    )


@pytest.fixture
def app(services):
    return create_app(services=services, run_init_db=False)


@pytest.fixture
def users(session_factory):
    with session_factory() as session, session.begin():
        rows = []
        for credentials, email, name, is_admin in (
            (ADMIN, "admin@shop.mn", "Admin", True),
            (CUSTOMER, "bat@shop.mn", "Bat", False),
            (OTHER_CUSTOMER, "dorj@shop.mn", "Dorj", False),
        ):
            user = User(username=credentials["username"], email=email, name=name, is_admin=is_admin)
            user.set_password(credentials["password"])
            rows.append(user)
        session.add_all(rows)
        session.flush()
        return {u.username: u.id for u in rows}


def _logged_in(app, credentials):
    client = TestClient(app)
    response = client.post("/api/login", json=credentials)
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_client(app, users):
    return _logged_in(app, ADMIN)


@pytest.fixture
def customer_client(app, users):
    return _logged_in(app, CUSTOMER)


@pytest.fixture
def other_customer_client(app, users):
    return _logged_in(app, OTHER_CUSTOMER)


@pytest.fixture
def make_product(session_factory):
    def _make(name="Beef ribs", category="beef", price="25.00", stock=10, **extra):
        with session_factory() as session, session.begin():
            product = Product(
                name=name,
                category=category,
                price=Decimal(price),
                stock=stock,
                description=extra.pop("description", ""),
                image_url=extra.pop("image_url", ""),
                **extra,
            )
            session.add(product)
            session.flush()
            return product.id
    return _make


@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as session:
            product = session.get(Product, product_id)
            return None if product is None else product.stock
    return _stock


@pytest.fixture
def count_rows(session_factory):
    def _count(model):
        with session_factory() as session:
            return session.query(model).count()
    return _count
