"""001: create boards table

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
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE boards (
            id                      VARCHAR(64)     PRIMARY KEY,
            name                    VARCHAR(50)     NOT NULL,
            shape                   VARCHAR(20)     NOT NULL,
            status                  VARCHAR(20)     NOT NULL DEFAULT 'DRAFT',
            price_per_cell          INT             NOT NULL,
            home_team               VARCHAR(100)    NOT NULL,
            away_team               VARCHAR(100)    NOT NULL,
            sport                   VARCHAR(10)     NOT NULL DEFAULT 'nfl',
            payout_schedule         JSONB           NOT NULL,
            row_headers             JSONB           NOT NULL DEFAULT '[]',
            col_headers             JSONB           NOT NULL DEFAULT '[]',
            band_headers            JSONB           NOT NULL DEFAULT '[]',
            shuffle_seed            VARCHAR(64),
            external_game_id        VARCHAR(128),
            starts_at               TIMESTAMPTZ,
            created_by              VARCHAR(64),
            max_cells_per_claimant  INT,
            period_results          JSONB           NOT NULL DEFAULT '{}',
            opened_at               TIMESTAMPTZ,
            locked_at               TIMESTAMPTZ,
            completed_at            TIMESTAMPTZ,
            cancelled_at            TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_boards_shape CHECK (
                shape IN ('SHOTGUN', 'FIVE_BY_FIVE', 'TEN_BY_TEN')
            ),
            CONSTRAINT ck_boards_status CHECK (
                status IN ('DRAFT', 'OPEN', 'LOCKED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')
            ),
            CONSTRAINT ck_boards_sport CHECK (
                sport IN ('nfl', 'nba', 'ncaaf', 'ncaab', 'nhl', 'other')
            ),
            CONSTRAINT ck_boards_price CHECK (price_per_cell BETWEEN 10 AND 100000),
            CONSTRAINT ck_boards_teams_differ CHECK (home_team <> away_team),
            CONSTRAINT ck_boards_cell_limit CHECK (
                max_cells_per_claimant IS NULL OR max_cells_per_claimant >= 1
            )
        );
    """)
    op.execute("CREATE INDEX idx_boards_status_created ON boards (status, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_boards_updated_at
            BEFORE UPDATE ON boards
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE boards IS 'Squares boards: configuration, headers, lifecycle, period results';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS boards;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
