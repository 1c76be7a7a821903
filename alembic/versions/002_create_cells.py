"""002: create cells table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE cells (
            board_id            VARCHAR(64)     NOT NULL REFERENCES boards (id) ON DELETE CASCADE,
            row_idx             SMALLINT        NOT NULL,
            col_idx             SMALLINT        NOT NULL,
            owner_user_id       VARCHAR(64),
            owner_display_name  VARCHAR(100),
            claimed_at          TIMESTAMPTZ,
            is_winner           BOOLEAN         NOT NULL DEFAULT FALSE,
            winning_periods     JSONB           NOT NULL DEFAULT '[]',
            PRIMARY KEY (board_id, row_idx, col_idx),
            CONSTRAINT ck_cells_coords CHECK (row_idx >= 0 AND col_idx >= 0),
            CONSTRAINT ck_cells_owner_complete CHECK (
                (owner_user_id IS NULL AND owner_display_name IS NULL AND claimed_at IS NULL)
                OR (owner_user_id IS NOT NULL AND owner_display_name IS NOT NULL
                    AND claimed_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_cells_owner ON cells (board_id, owner_user_id);")
    op.execute("COMMENT ON TABLE cells IS 'One row per square; ownership is set once by conditional UPDATE';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS cells;")
