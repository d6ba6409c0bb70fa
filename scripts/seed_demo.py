#!/usr/bin/env python3
"""
Seed script to create demo staff, menu, pickup slots and a promo code
"""

import asyncio
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# (start, end) pickup windows opened every day
DAILY_WINDOWS = [
    (time(11, 30), time(12, 0)),
    (time(12, 0), time(12, 30)),
    (time(12, 30), time(13, 0)),
    (time(18, 0), time(18, 30)),
    (time(18, 30), time(19, 0)),
    (time(19, 0), time(19, 30)),
]


async def seed_demo_data(days: int = 3):
    """Seed demo data for development"""
    from sqlalchemy import select

    from app.database import SessionLocal, engine, Base
    from app.models import (
        BusinessSetting,
        Dish,
        DishVariant,
        PromoCode,
        TimeSlot,
        User,
        UserRole,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo data already exists
        result = await db.execute(select(User).where(User.email == "admin@pickup.local"))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo staff...")

        db.add_all([
            User(
                email="admin@pickup.local",
                hashed_password=pwd_context.hash("admin123"),
                first_name="Ada",
                last_name="Admin",
                phone="+15550000001",
                role=UserRole.ADMIN,
            ),
            User(
                email="counter@pickup.local",
                hashed_password=pwd_context.hash("counter123"),
                first_name="Cole",
                last_name="Counter",
                phone="+15550000002",
                role=UserRole.EMPLOYEE,
            ),
        ])

        print("Creating demo menu...")

        pizza = Dish(
            name="Margherita Pizza",
            description="Tomato, mozzarella, basil",
            price=Decimal("12.50"),
            allergens=["gluten", "dairy"],
            tags=["vegetarian"],
            preparation_time_minutes=15,
            stock_quantity=40,
            stock_threshold=5,
        )
        pizza.variants = [
            DishVariant(name="Regular", price_modifier=Decimal("0"), is_default=True),
            DishVariant(name="Large", price_modifier=Decimal("4.00")),
            DishVariant(name="Extra cheese", price_modifier=Decimal("1.50")),
        ]

        salad = Dish(
            name="Caesar Salad",
            description="Romaine, parmesan, croutons",
            price=Decimal("9.00"),
            allergens=["gluten", "dairy", "egg"],
            preparation_time_minutes=10,
        )
        salad.variants = [
            DishVariant(name="Add chicken", price_modifier=Decimal("3.50")),
        ]

        tiramisu = Dish(
            name="Tiramisu",
            price=Decimal("6.00"),
            allergens=["dairy", "egg"],
            tags=["dessert"],
            preparation_time_minutes=5,
            stock_quantity=12,
            stock_threshold=3,
        )

        menu = [pizza, salad, tiramisu]
        db.add_all(menu)

        print("Creating pickup slots...")

        today = date.today()
        slots = [
            TimeSlot(date=today + timedelta(days=offset), start_time=start, end_time=end, max_capacity=8)
            for offset in range(days)
            for start, end in DAILY_WINDOWS
        ]
        db.add_all(slots)

        db.add(PromoCode(
            code="WELCOME10",
            discount_percentage=Decimal("10"),
            minimum_order_amount=Decimal("15.00"),
            max_uses=100,
            valid_from=datetime.utcnow(),
            valid_until=datetime.utcnow() + timedelta(days=30),
        ))

        db.add(BusinessSetting(
            key="tax_rate",
            value="0.08",
            description="Sales tax applied to the discounted subtotal",
        ))

        await db.commit()

        print(f"""
Demo data created successfully!

Users:
  Admin:
    Email: admin@pickup.local
    Password: admin123

  Counter employee:
    Email: counter@pickup.local
    Password: counter123

Menu: {len(menu)} dishes created
Pickup slots: {len(slots)} over {days} days
Promo code: WELCOME10 (10% off orders from $15)
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
