"""UI state and change log tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from alembic import op


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # One row per subject: current tree and its version
    op.execute("""
        CREATE TABLE ui_states (
            user_id TEXT PRIMARY KEY,
            version INTEGER NOT NULL CHECK (version >= 1),
            tree JSONB NOT NULL,
            last_modified TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    # Change log; seq gives insertion order for newest-first reads and trimming
    op.execute("""
        CREATE TABLE ui_changes (
            seq BIGSERIAL PRIMARY KEY,
            id TEXT UNIQUE NOT NULL,
            user_id TEXT NOT NULL,
            timestamp TIMESTAMPTZ NOT NULL DEFAULT now(),
            description TEXT NOT NULL,
            before_tree JSONB NOT NULL,
            after_tree JSONB NOT NULL,
            triggered_by TEXT
        );
    """)

    op.execute("""
        CREATE INDEX idx_ui_changes_user_seq ON ui_changes(user_id, seq DESC);
    """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS ui_changes;")
    op.execute("DROP TABLE IF EXISTS ui_states;")
