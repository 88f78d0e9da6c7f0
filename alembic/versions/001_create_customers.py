"""001: create customers table

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")
    op.execute("""
        CREATE TABLE customers (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            tenant_id       VARCHAR(64)     NOT NULL,
            email           VARCHAR(255)    NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            full_name       VARCHAR(255),
            phone           VARCHAR(32),
            address         JSONB,
            loyalty_points  INTEGER         NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_customers_tenant_email UNIQUE (tenant_id, email),
            CONSTRAINT ck_customers_loyalty_non_negative CHECK (loyalty_points >= 0)
        );
    """)
    # Serves the list query: tenant filter + newest-first ordering
    op.execute("""
        CREATE INDEX idx_customers_tenant_created
            ON customers (tenant_id, created_at DESC, id DESC);
    """)
    op.execute(
        "COMMENT ON TABLE customers IS 'Tenant-scoped customer records';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS customers CASCADE;")
