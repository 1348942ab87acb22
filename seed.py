"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 3 universities around Amman
  - 8 sample users (3 drivers, 1 driver+passenger, 4 passengers)
  - 4 driver profiles
  - 6 scheduled rides (two in peak hours, so they carry a traffic fee)
  - a handful of bookings, with the rides' seat counters updated to match
"""

import asyncio
from datetime import timedelta

from sqlalchemy import text

from tareeqi.domain.clock import regional_now
from tareeqi.domain.enums import (
    BookingStatus,
    FuelType,
    Gender,
    GenderPreference,
    RideDirection,
    RideStatus,
    UserRole,
)
from tareeqi.domain.pricing import FeeCalculator, booking_total
from tareeqi.infrastructure.database import async_session_factory, engine
from tareeqi.infrastructure.models import (
    BookingModel,
    DriverProfileModel,
    RideModel,
    UniversityModel,
    UserModel,
)

UNIVERSITIES = [
    {"name": "University of Jordan", "city": "Amman", "lat": 32.0146, "lng": 35.8706},
    {"name": "German Jordanian University", "city": "Madaba", "lat": 31.7777, "lng": 35.8032},
    {"name": "Princess Sumaya University", "city": "Amman", "lat": 32.0226, "lng": 35.8752},
]

USERS = [
    {"full_name": "Omar Haddad", "email": "omar@example.com", "role": UserRole.DRIVER, "gender": Gender.MALE},
    {"full_name": "Lina Khalil", "email": "lina@example.com", "role": UserRole.DRIVER, "gender": Gender.FEMALE},
    {"full_name": "Yousef Nasser", "email": "yousef@example.com", "role": UserRole.DRIVER, "gender": Gender.MALE},
    {"full_name": "Rania Saleh", "email": "rania@example.com", "role": UserRole.BOTH, "gender": Gender.FEMALE},
    {"full_name": "Ahmad Odeh", "email": "ahmad@example.com", "role": UserRole.PASSENGER, "gender": Gender.MALE},
    {"full_name": "Sara Mansour", "email": "sara@example.com", "role": UserRole.PASSENGER, "gender": Gender.FEMALE},
    {"full_name": "Khaled Amin", "email": "khaled@example.com", "role": UserRole.PASSENGER, "gender": Gender.MALE},
    {"full_name": "Dana Fares", "email": "dana@example.com", "role": UserRole.PASSENGER, "gender": Gender.FEMALE},
]

VEHICLES = [
    {"license_number": "JO-DL-1001", "car_make": "Toyota", "car_model": "Corolla", "car_year": 2019, "car_color": "White", "car_plate_number": "10-12345", "car_seats": 4},
    {"license_number": "JO-DL-1002", "car_make": "Hyundai", "car_model": "Elantra", "car_year": 2021, "car_color": "Silver", "car_plate_number": "20-23456", "car_seats": 4},
    {"license_number": "JO-DL-1003", "car_make": "Kia", "car_model": "Carnival", "car_year": 2020, "car_color": "Black", "car_plate_number": "30-34567", "car_seats": 7},
    {"license_number": "JO-DL-1004", "car_make": "Toyota", "car_model": "Prius", "car_year": 2018, "car_color": "Blue", "car_plate_number": "40-45678", "car_seats": 4},
]


async def seed():
    fees = FeeCalculator()
    tomorrow = (regional_now() + timedelta(days=1)).replace(
        minute=0, second=0, microsecond=0
    )

    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Universities ──────────────────────────────────────────────
        universities = [
            UniversityModel(
                name=u["name"], city=u["city"], latitude=u["lat"], longitude=u["lng"]
            )
            for u in UNIVERSITIES
        ]
        session.add_all(universities)
        await session.flush()
        print(f"  Created {len(universities)} universities")

        # ── Users ─────────────────────────────────────────────────────
        users = [UserModel(**u) for u in USERS]
        session.add_all(users)
        await session.flush()
        print(f"  Created {len(users)} users")

        # ── Driver profiles ───────────────────────────────────────────
        drivers = users[:4]
        for user, vehicle in zip(drivers, VEHICLES):
            session.add(DriverProfileModel(user_id=user.id, **vehicle))
        await session.flush()
        print(f"  Created {len(VEHICLES)} driver profiles")

        # ── Rides ─────────────────────────────────────────────────────
        rides_data = [
            # Morning peak, to campus
            {"driver": drivers[0], "origin": "Sweileh", "destination": "University of Jordan",
             "origin_at": (32.0300, 35.8400), "hour": 7, "seats": 3, "price": 1.5,
             "distance": 8.4, "pref": GenderPreference.MALE_ONLY,
             "direction": RideDirection.TO_UNIVERSITY, "university": universities[0]},
            {"driver": drivers[1], "origin": "Abdoun", "destination": "Princess Sumaya University",
             "origin_at": (31.9500, 35.8800), "hour": 8, "seats": 4, "price": 2.0,
             "distance": 12.0, "pref": GenderPreference.FEMALE_ONLY,
             "direction": RideDirection.TO_UNIVERSITY, "university": universities[2]},
            # Off-peak
            {"driver": drivers[2], "origin": "Madaba", "destination": "German Jordanian University",
             "origin_at": (31.7167, 35.7939), "hour": 11, "seats": 6, "price": 1.0,
             "distance": 9.5, "pref": GenderPreference.MALE_ONLY,
             "direction": RideDirection.TO_UNIVERSITY, "university": universities[1]},
            {"driver": drivers[3], "origin": "University of Jordan", "destination": "Khalda",
             "origin_at": (32.0146, 35.8706), "hour": 13, "seats": 3, "price": 1.25,
             "distance": 6.2, "pref": GenderPreference.FEMALE_ONLY,
             "direction": RideDirection.FROM_UNIVERSITY, "university": universities[0]},
            # Evening peak, from campus
            {"driver": drivers[0], "origin": "University of Jordan", "destination": "Sweileh",
             "origin_at": (32.0146, 35.8706), "hour": 16, "seats": 3, "price": 1.5,
             "distance": 8.4, "pref": GenderPreference.MALE_ONLY,
             "direction": RideDirection.FROM_UNIVERSITY, "university": universities[0]},
            {"driver": drivers[2], "origin": "Downtown Amman", "destination": "Zarqa",
             "origin_at": None, "hour": 20, "seats": 5, "price": 2.5,
             "distance": 24.0, "pref": GenderPreference.MALE_ONLY,
             "direction": None, "university": None},
        ]

        rides = []
        for r in rides_data:
            departure = tomorrow.replace(hour=r["hour"])
            ride = RideModel(
                driver_id=r["driver"].id,
                origin=r["origin"],
                destination=r["destination"],
                origin_lat=r["origin_at"][0] if r["origin_at"] else None,
                origin_lng=r["origin_at"][1] if r["origin_at"] else None,
                departure_time=departure,
                total_seats=r["seats"],
                available_seats=r["seats"],
                price_per_seat=r["price"],
                traffic_fee=fees.traffic_fee(departure, r["distance"]),
                distance_km=r["distance"],
                status=RideStatus.SCHEDULED,
                gender_preference=r["pref"],
                direction=r["direction"],
                university_id=r["university"].id if r["university"] else None,
                fuel_type=FuelType.PETROL,
                ac_enabled=True,
                amenities=["music"],
            )
            session.add(ride)
            rides.append(ride)
        await session.flush()
        print(f"  Created {len(rides)} rides")

        # ── Bookings ──────────────────────────────────────────────────
        passengers = users[4:]
        bookings_data = [
            (rides[0], passengers[0], 1, BookingStatus.CONFIRMED),
            (rides[0], passengers[2], 2, BookingStatus.PENDING),
            (rides[1], passengers[1], 1, BookingStatus.PENDING),
            (rides[2], passengers[0], 2, BookingStatus.CONFIRMED),
            (rides[3], passengers[3], 1, BookingStatus.CONFIRMED),
        ]
        for ride, passenger, seats, status in bookings_data:
            session.add(
                BookingModel(
                    ride_id=ride.id,
                    passenger_id=passenger.id,
                    seats_booked=seats,
                    total_price=booking_total(ride.price_per_seat, seats, ride.traffic_fee),
                    status=status,
                )
            )
            ride.available_seats -= seats
        await session.flush()
        print(f"  Created {len(bookings_data)} bookings")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
