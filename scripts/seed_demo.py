#!/usr/bin/env python3
"""
Seed script to create demo accounts, dining tables and a small menu
"""

import asyncio

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEMO_TABLES = [
    ("T1", 2, "window"),
    ("T2", 2, "window"),
    ("T3", 4, "main room"),
    ("T4", 4, "main room"),
    ("T5", 6, "main room"),
    ("P1", 4, "patio"),
    ("P2", 8, "patio"),
    ("B1", 12, "private room"),
]

# name, category, price in cents, minutes to prepare, tags
DEMO_MENU = [
    ("Burrata with heirloom tomatoes", "appetizer", 1400, 10, ["vegetarian"]),
    ("Crispy calamari", "appetizer", 1250, 12, []),
    ("Steak frites", "main", 3200, 25, []),
    ("Wild mushroom risotto", "main", 2400, 22, ["vegetarian"]),
    ("Seared salmon", "main", 2900, 20, ["gluten-free"]),
    ("Chocolate fondant", "dessert", 1100, 15, ["vegetarian"]),
    ("House lemonade", "beverage", 500, 2, ["vegan"]),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from app.database import SessionLocal, engine, Base
    from app.models.menu import MenuItem
    from app.models.table import Table
    from app.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        result = await db.execute(select(User).where(User.email == "admin@bistro.example"))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo users...")

        users = [
            User(
                email="admin@bistro.example",
                hashed_password=pwd_context.hash("admin123"),
                full_name="Bistro Admin",
                role=UserRole.ADMIN,
            ),
            User(
                email="host@bistro.example",
                hashed_password=pwd_context.hash("host1234"),
                full_name="Front of House",
                role=UserRole.STAFF,
            ),
            User(
                email="guest@bistro.example",
                hashed_password=pwd_context.hash("guest123"),
                full_name="Demo Guest",
                phone="+15551234567",
                role=UserRole.CUSTOMER,
            ),
        ]
        db.add_all(users)

        print("Creating dining tables...")
        for table_number, capacity, location in DEMO_TABLES:
            db.add(Table(table_number=table_number, capacity=capacity, location=location))

        print("Creating menu...")
        for name, category, price_cents, prep_minutes, tags in DEMO_MENU:
            db.add(MenuItem(
                name=name,
                category=category,
                price_cents=price_cents,
                preparation_time_minutes=prep_minutes,
                tags=tags,
            ))

        await db.commit()

        print(f"""
Demo data created successfully!

Users:
  Admin:
    Email: admin@bistro.example
    Password: admin123

  Staff:
    Email: host@bistro.example
    Password: host1234

  Customer:
    Email: guest@bistro.example
    Password: guest123

Tables: {len(DEMO_TABLES)} created
Menu items: {len(DEMO_MENU)} created
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
