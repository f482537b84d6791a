import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SQLALCHEMY_DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

import storefront.models  # noqa: E402,F401
from storefront.config import settings  # noqa: E402
from storefront.database import engine, get_session  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.models.address import Address  # noqa: E402
from storefront.models.coupon import Coupon  # noqa: E402
from storefront.models.product import Product  # noqa: E402
from storefront.models.shipping_region import ShippingRegion  # noqa: E402
from storefront.models.user import User  # noqa: E402
from storefront.utils.hash import hash_password  # noqa: E402
from storefront.utils.token import create_access_token  # noqa: E402

PASSWORD = "secret-pass-123"


@pytest.fixture(autouse=True)
def fresh_state(tmp_path, monkeypatch):
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    app.state.config_cache.clear()
    monkeypatch.setattr(settings, "invoice_dir", str(tmp_path / "invoices"))
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(session) -> TestClient:
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    return TestClient(app)


def _make_user(session: Session, email: str, role: str = "user") -> User:
    user = User(
        first_name="Asha",
        last_name="Raman",
        email=email,
        password=hash_password(PASSWORD),
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def _auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture()
def customer(session) -> User:
    return _make_user(session, "asha@mailbox.in")


@pytest.fixture()
def customer_headers(customer) -> dict:
    return _auth(customer)


@pytest.fixture()
def admin(session) -> User:
    return _make_user(session, "admin@mailbox.in", role="admin")


@pytest.fixture()
def admin_headers(admin) -> dict:
    return _auth(admin)


@pytest.fixture()
def make_product(session):
    def factory(name, price, gst=0, inclusive=True, stock=10, **extra):
        product = Product(
            name=name,
            slug=name.lower().replace(" ", "-"),
            price=Decimal(str(price)),
            gst_percentage=gst,
            tax_inclusive=inclusive,
            stock=stock,
            **extra,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return factory


@pytest.fixture()
def shipping_regions(session):
    local = ShippingRegion(
        region_name="Tamil Nadu & Puducherry",
        region_key="local",
        states=["Tamil Nadu", "Puducherry"],
        base_charge=Decimal("40.00"),
        free_delivery_above=Decimal("500.00"),
        sort_order=1,
    )
    rest = ShippingRegion(
        region_name="Rest of India",
        region_key="rest_of_india",
        states=[],
        base_charge=Decimal("80.00"),
        free_delivery_above=Decimal("1000.00"),
        sort_order=2,
    )
    session.add(local)
    session.add(rest)
    session.commit()
    return local, rest


@pytest.fixture()
def make_coupon(session):
    def factory(code, discount_type="percentage", value=10, min_order=None, **extra):
        coupon = Coupon(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(str(value)),
            min_order_value=Decimal(str(min_order)) if min_order is not None else None,
            **extra,
        )
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon

    return factory


@pytest.fixture()
def make_address(session, customer):
    def factory(state="Tamil Nadu", **extra):
        address = Address(
            user_id=customer.id,
            full_name="Asha Raman",
            phone="9876543210",
            address_line1="12 Temple Street",
            city="Chennai",
            state=state,
            pincode="600001",
            **extra,
        )
        session.add(address)
        session.commit()
        session.refresh(address)
        return address

    return factory
