"""Test configuration and fixtures"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.models.menu import Dish, DishVariant
from app.models.promo import PromoCode
from app.models.time_slot import TimeSlot
from app.models.user import User, UserRole
from app.notifications import get_notifier
from app.notifications.base import NotificationResult
from app.schemas.order import CustomerInfo, OrderCreate, OrderItemCreate
from app.services.lifecycle import OrderLifecycleManager
from app.services.placement import OrderPlacementEngine
from app.api.auth import create_access_token, get_password_hash


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeNotifier:
    """Records notifications instead of queueing them"""

    def __init__(self):
        self.sent = []

    def notify(self, order, kind, reason=None):
        self.sent.append((order.order_number, kind, reason))
        return NotificationResult(success=True)

    @property
    def kinds(self):
        return [kind for _, kind, _ in self.sent]


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def placement_engine(test_db, notifier):
    return OrderPlacementEngine(test_db, notifier=notifier)


@pytest.fixture
def lifecycle(test_db, notifier):
    return OrderLifecycleManager(test_db, notifier=notifier)


async def _create_user(db, email, role, password="testpass123"):
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=get_password_hash(password),
        first_name="Test",
        last_name=role.value.title(),
        phone="+15551230000",
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def test_user(test_db):
    """Create a counter employee"""
    return await _create_user(test_db, "employee@example.com", UserRole.EMPLOYEE)


@pytest.fixture
async def test_manager(test_db):
    """Create a manager"""
    return await _create_user(test_db, "manager@example.com", UserRole.MANAGER)


@pytest.fixture
async def test_admin_user(test_db):
    """Create an admin"""
    return await _create_user(test_db, "admin@example.com", UserRole.ADMIN, password="adminpass123")


@pytest.fixture
async def test_dish(test_db):
    """Stock-tracked dish"""
    dish = Dish(
        name="Margherita Pizza",
        description="Classic tomato and mozzarella",
        price=Decimal("19.99"),
        allergens=["gluten", "dairy"],
        tags=["vegetarian"],
        stock_quantity=10,
        stock_threshold=2,
    )
    test_db.add(dish)
    await test_db.commit()
    return dish


@pytest.fixture
async def untracked_dish(test_db):
    """Dish without stock tracking"""
    dish = Dish(name="Caesar Salad", price=Decimal("9.00"), tags=[])
    test_db.add(dish)
    await test_db.commit()
    return dish


@pytest.fixture
async def test_variant(test_db, test_dish):
    variant = DishVariant(dish_id=test_dish.id, name="Large", price_modifier=Decimal("4.00"))
    test_db.add(variant)
    await test_db.commit()
    return variant


@pytest.fixture
def pickup_date():
    return date.today() + timedelta(days=1)


@pytest.fixture
async def test_slot(test_db, pickup_date):
    """12:00-12:30 tomorrow, room for five orders"""
    slot = TimeSlot(
        date=pickup_date,
        start_time=time(12, 0),
        end_time=time(12, 30),
        max_capacity=5,
    )
    test_db.add(slot)
    await test_db.commit()
    return slot


@pytest.fixture
def pickup_at(pickup_date):
    return datetime.combine(pickup_date, time(12, 15))


@pytest.fixture
async def percent_promo(test_db):
    """20% off, no minimum"""
    promo = PromoCode(
        code="SAVE20",
        discount_percentage=Decimal("20"),
        max_uses=10,
        valid_from=datetime.utcnow() - timedelta(days=1),
        valid_until=datetime.utcnow() + timedelta(days=30),
    )
    test_db.add(promo)
    await test_db.commit()
    return promo


@pytest.fixture
async def fixed_promo(test_db):
    """150 off, more than any test order"""
    promo = PromoCode(
        code="BIG150",
        discount_amount=Decimal("150"),
        valid_from=datetime.utcnow() - timedelta(days=1),
        valid_until=datetime.utcnow() + timedelta(days=30),
    )
    test_db.add(promo)
    await test_db.commit()
    return promo


@pytest.fixture
def guest():
    return CustomerInfo(
        email="guest@example.com",
        phone="+15559876543",
        first_name="Grace",
        last_name="Guest",
    )


@pytest.fixture
def make_order(guest, pickup_at):
    """Build a placement request; defaults to a guest checkout"""

    def _make(items, **overrides):
        data = {
            "customer_info": guest,
            "pickup_slot": pickup_at,
            "items": [
                item if isinstance(item, OrderItemCreate) else OrderItemCreate(**item)
                for item in items
            ],
        }
        data.update(overrides)
        return OrderCreate(**data)

    return _make


@pytest.fixture
async def placed_order(placement_engine, make_order, test_dish, test_slot):
    """A new guest order for two pizzas"""
    return await placement_engine.place(make_order([{"dish_id": test_dish.id, "quantity": 2}]))


@pytest.fixture
async def client(test_db, notifier):
    """Create test client with overridden database and notifier"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def _authorize(client, user):
    token = create_access_token(user)
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create employee authenticated test client"""
    return _authorize(client, test_user)


@pytest.fixture
async def manager_client(client, test_manager):
    """Create manager authenticated test client"""
    return _authorize(client, test_manager)


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    return _authorize(client, test_admin_user)
