#!/usr/bin/env python3
"""
Seed script to create the admin account, a demo customer and sample bookings
"""

import asyncio
from datetime import date, time, timedelta


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from app.api.auth import get_password_hash
    from app.booking import service
    from app.booking.errors import BookingError
    from app.bootstrap import ensure_bootstrap_admin
    from app.database import SessionLocal, engine, Base
    from app.models.user import User, UserRole

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        admin = await ensure_bootstrap_admin(db)
        print(f"Admin account: {admin.email}")

        result = await db.execute(select(User).where(User.email == "guest@sunnybeach.com"))
        if result.scalar_one_or_none():
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo customer...")
        customer = User(
            email="guest@sunnybeach.com",
            hashed_password=get_password_hash("guest123"),
            first_name="Demo",
            last_name="Guest",
            phone="+33600000000",
            role=UserRole.CUSTOMER,
        )
        db.add(customer)
        await db.commit()

        print("Creating sample reservations...")
        tomorrow = date.today() + timedelta(days=1)
        bookings = [
            ("Parasol", time(12, 0), time(14, 0), 3),
            ("Mini Cabane", time(15, 0), time(17, 30), 5),
            ("Cabane", time(19, 0), time(22, 0), 10),
        ]

        for table_type, start, end, people in bookings:
            try:
                reservation = await service.create_reservation(
                    db, customer, table_type, tomorrow, start, end, people
                )
            except BookingError as e:
                print(f"  Skipped {table_type}: {e.message}")
                continue
            print(f"  {table_type} {start:%H:%M}-{end:%H:%M}: {reservation.total_price} ({reservation.status})")

        # Walk one booking through to admin review
        reservations = await service.get_own_reservations(db, customer)
        if reservations:
            first = reservations[-1]
            await service.confirm_reservation(db, customer, first.id)
            await service.change_status(db, admin, first.id, "accepted")
            print(f"  Accepted reservation {first.id}")

        print("\n✅ Demo data seeded successfully!")
        print("\nLogin credentials:")
        print(f"  Admin: {admin.email}")
        print("  Customer: guest@sunnybeach.com / guest123")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
