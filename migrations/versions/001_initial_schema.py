"""Initial schema: users, driver profiles, universities, rides, bookings, reviews.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        )
    ]
    if with_updated:
        cols.append(
            sa.Column(
                "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
            )
        )
    return cols


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column(
            "role",
            sa.Enum("driver", "passenger", "both", name="user_role"),
            server_default="passenger",
        ),
        sa.Column(
            "gender", sa.Enum("male", "female", name="user_gender"), nullable=True
        ),
        *_timestamps(with_updated=False),
    )

    # ── driver_profiles ───────────────────────────────────────────────
    op.create_table(
        "driver_profiles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), unique=True, nullable=False
        ),
        sa.Column("license_number", sa.String(50), unique=True, nullable=False),
        sa.Column("car_make", sa.String(50), nullable=False),
        sa.Column("car_model", sa.String(50), nullable=False),
        sa.Column("car_year", sa.Integer, nullable=False),
        sa.Column("car_color", sa.String(30), nullable=False),
        sa.Column("car_plate_number", sa.String(20), unique=True, nullable=False),
        sa.Column("car_seats", sa.Integer, nullable=False),
        sa.Column("rating", sa.Float, server_default="0", nullable=False),
        sa.Column("total_reviews", sa.Integer, server_default="0", nullable=False),
        sa.Column("total_rides", sa.Integer, server_default="0", nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "car_seats >= 1 AND car_seats <= 8", name="ck_driver_car_seats"
        ),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_driver_rating"),
    )
    op.create_index("idx_driver_profiles_user", "driver_profiles", ["user_id"])

    # ── universities ──────────────────────────────────────────────────
    op.create_table(
        "universities",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        *_timestamps(with_updated=False),
    )

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("driver_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("origin", sa.String(255), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("origin_lat", sa.Float, nullable=True),
        sa.Column("origin_lng", sa.Float, nullable=True),
        sa.Column("destination_lat", sa.Float, nullable=True),
        sa.Column("destination_lng", sa.Float, nullable=True),
        sa.Column("departure_time", sa.DateTime, nullable=False),
        sa.Column("total_seats", sa.Integer, nullable=False),
        sa.Column("available_seats", sa.Integer, nullable=False),
        sa.Column("price_per_seat", sa.Float, nullable=False),
        sa.Column("traffic_fee", sa.Float, server_default="0", nullable=False),
        sa.Column("distance_km", sa.Float, nullable=True),
        sa.Column(
            "status",
            sa.Enum("scheduled", "completed", "cancelled", name="ride_status"),
            server_default="scheduled",
            nullable=False,
        ),
        sa.Column(
            "gender_preference",
            sa.Enum("male_only", "female_only", name="ride_gender_preference"),
            server_default="male_only",
            nullable=False,
        ),
        sa.Column(
            "direction",
            sa.Enum("to_university", "from_university", name="ride_direction"),
            nullable=True,
        ),
        sa.Column(
            "university_id",
            sa.Integer,
            sa.ForeignKey("universities.id"),
            nullable=True,
        ),
        sa.Column(
            "fuel_type",
            sa.Enum("petrol", "hybrid", "electric", name="fuel_type"),
            server_default="petrol",
        ),
        sa.Column("ac_enabled", sa.Boolean, server_default=sa.false()),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("amenities", sa.JSON, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("total_seats >= 1", name="ck_rides_total_seats"),
        sa.CheckConstraint(
            "available_seats >= 0 AND available_seats <= total_seats",
            name="ck_rides_available_seats",
        ),
        sa.CheckConstraint("price_per_seat >= 0", name="ck_rides_price"),
    )
    op.create_index("idx_rides_driver", "rides", ["driver_id"])
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_departure", "rides", ["departure_time"])
    op.create_index("idx_rides_university", "rides", ["university_id"])

    # ── bookings ──────────────────────────────────────────────────────
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ride_id", sa.Integer, sa.ForeignKey("rides.id"), nullable=False),
        sa.Column(
            "passenger_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("seats_booked", sa.Integer, nullable=False),
        sa.Column("total_price", sa.Float, nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "confirmed", "cancelled", "completed", name="booking_status"
            ),
            server_default="pending",
            nullable=False,
        ),
        sa.Column("pickup_location", sa.String(255), nullable=True),
        sa.Column("dropoff_location", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "ride_id", "passenger_id", name="uq_bookings_ride_passenger"
        ),
        sa.CheckConstraint("seats_booked > 0", name="ck_bookings_seats"),
        sa.CheckConstraint("total_price >= 0", name="ck_bookings_price"),
    )
    op.create_index("idx_bookings_ride", "bookings", ["ride_id"])
    op.create_index("idx_bookings_passenger", "bookings", ["passenger_id"])
    op.create_index("idx_bookings_status", "bookings", ["status"])

    # ── reviews ───────────────────────────────────────────────────────
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id", sa.Integer, sa.ForeignKey("bookings.id"), nullable=False
        ),
        sa.Column("reviewer_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reviewee_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        *_timestamps(with_updated=False),
        sa.UniqueConstraint(
            "booking_id", "reviewer_id", name="uq_reviews_booking_reviewer"
        ),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )
    op.create_index("idx_reviews_booking", "reviews", ["booking_id"])
    op.create_index("idx_reviews_reviewee", "reviews", ["reviewee_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("bookings")
    op.drop_table("rides")
    op.drop_table("universities")
    op.drop_table("driver_profiles")
    op.drop_table("users")
    for enum_name in (
        "booking_status",
        "fuel_type",
        "ride_direction",
        "ride_gender_preference",
        "ride_status",
        "user_gender",
        "user_role",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
