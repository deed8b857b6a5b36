"""Initial schema: users, vehicles, follows and refresh tokens

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. Users ──────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE users (
            id SERIAL PRIMARY KEY,
            full_name VARCHAR(255) NOT NULL,
            email VARCHAR(180) NOT NULL UNIQUE,
            password VARCHAR(255),
            roles JSON NOT NULL DEFAULT '[]',
            is_verified BOOLEAN NOT NULL DEFAULT false,
            is_active BOOLEAN NOT NULL DEFAULT false,
            activation_token VARCHAR(128) UNIQUE,
            token_expires_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ
        );
    """)

    # ── 2. Vehicles (single table, discriminated on type) ─────────────────
    op.execute("""
        CREATE TABLE vehicles (
            id SERIAL PRIMARY KEY,
            type VARCHAR(20) NOT NULL,
            brand VARCHAR(100) NOT NULL,
            model VARCHAR(100) NOT NULL,
            price NUMERIC(10, 2) NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 0,
            merchant_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            colour VARCHAR(50),
            engine_capacity NUMERIC(8, 2),
            permitted_maximum_mass INTEGER,
            load_capacity INTEGER,
            number_of_doors INTEGER,
            category VARCHAR(20),
            number_of_beds INTEGER,
            number_of_axles INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ
        );
    """)
    op.execute("CREATE INDEX ix_vehicles_merchant_id ON vehicles (merchant_id);")
    op.execute("CREATE INDEX ix_vehicles_type ON vehicles (type);")

    # ── 3. Follows ────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE vehicle_follows (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            vehicle_id INTEGER NOT NULL REFERENCES vehicles(id) ON DELETE CASCADE,
            followed_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT unique_user_vehicle_follow UNIQUE (user_id, vehicle_id)
        );
    """)
    op.execute("CREATE INDEX ix_vehicle_follows_vehicle_id ON vehicle_follows (vehicle_id);")

    # ── 4. Refresh tokens ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE refresh_tokens (
            id SERIAL PRIMARY KEY,
            refresh_token VARCHAR(128) NOT NULL UNIQUE,
            username VARCHAR(255) NOT NULL,
            valid TIMESTAMPTZ NOT NULL
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS refresh_tokens;")
    op.execute("DROP TABLE IF EXISTS vehicle_follows;")
    op.execute("DROP TABLE IF EXISTS vehicles;")
    op.execute("DROP TABLE IF EXISTS users;")
