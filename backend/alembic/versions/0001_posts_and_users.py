from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_posts_and_users"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=255), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=255)),
        sa.Column("profile_image_url", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("author_id", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("author_id <> ''", name="posts_author_id_not_empty"),
    )
    op.create_index("ix_posts_created_at_id", "posts", ["created_at", "id"], unique=False)
    op.create_index("ix_posts_author_id_created_at", "posts", ["author_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_posts_author_id_created_at", table_name="posts")
    op.drop_index("ix_posts_created_at_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("users")
