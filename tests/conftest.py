import os
from decimal import Decimal

import pytest

os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYMENT_GATEWAY"] = "fake"
os.environ["APP_URL"] = "https://market.test"
os.environ.pop("SENDGRID_API_KEY", None)

from fastapi.testclient import TestClient  # noqa: E402

from marketpay.data.database import Base, SessionLocal, engine  # noqa: E402
from marketpay.data.models import CartItemModel, CartModel, UserModel  # noqa: E402
from marketpay.gateway import reset_gateway, set_gateway  # noqa: E402
from marketpay.gateway.fake_adapter import FakeGateway  # noqa: E402
from marketpay.services.notification_service import NotificationService  # noqa: E402


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_seller_onboarding_complete_email(self, address, seller_details):
        if self.fail:
            raise ConnectionError("broker unavailable")
        self.sent.append((address, seller_details))


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def notifier(monkeypatch):
    """Celery nie jest dostepne w testach, powiadomienia tylko zapisujemy."""
    recorder = RecordingNotifier()
    monkeypatch.setattr(
        NotificationService,
        "send_seller_onboarding_complete_email",
        staticmethod(recorder.send_seller_onboarding_complete_email),
    )
    return recorder


@pytest.fixture()
def client(gateway):
    from marketpay.main import create_app

    return TestClient(create_app())


def make_user(db, user_id, **fields):
    user = UserModel(id=user_id, **fields)
    db.add(user)
    db.commit()
    return user


def make_seller(db, user_id, account_id=None, **fields):
    return make_user(
        db,
        user_id,
        stripe_account_id=account_id or f"acct_{user_id}",
        stripe_status="active",
        is_seller=True,
        **fields,
    )


def make_cart(db, user_id, items=(), total=None, cart_id=None):
    """items: (seller_id, price, quantity) tuples."""
    if total is None:
        total = sum((Decimal(str(p)) * q for _, p, q in items), Decimal("0.00"))
    cart = CartModel(user_id=user_id, total_amount=total, status="active")
    if cart_id:
        cart.id = cart_id
    db.add(cart)
    db.flush()
    for n, (seller_id, price, quantity) in enumerate(items):
        db.add(
            CartItemModel(
                cart_id=cart.id,
                tool_id=f"tool-{n}",
                seller_id=seller_id,
                price=Decimal(str(price)),
                quantity=quantity,
            )
        )
    db.commit()
    return cart.id
