"""Initial template catalogue schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "templates",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("slug", sa.String(length=128), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="draft"),
        sa.Column(
            "visibility", sa.String(length=16), nullable=False, server_default="public"
        ),
        sa.Column("published_at", sa.DateTime(timezone=True)),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_version_id", sa.String(length=32)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )

    op.create_table(
        "template_versions",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column(
            "template_id",
            sa.String(length=32),
            sa.ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("prompt_template", sa.Text(), nullable=False),
        sa.Column("negative_prompt", sa.Text()),
        sa.Column(
            "model_provider", sa.String(length=64), nullable=False, server_default="gemini"
        ),
        sa.Column("model_name", sa.String(length=128), nullable=False),
        sa.Column("model_parameters", sa.JSON(), nullable=False),
        sa.Column(
            "output_mime", sa.String(length=64), nullable=False, server_default="image/png"
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("template_id", "version", name="uq_template_versions_version"),
    )

    op.create_foreign_key(
        "fk_templates_current_version",
        "templates",
        "template_versions",
        ["current_version_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=128), nullable=False),
    )

    op.create_table(
        "template_tags",
        sa.Column(
            "template_id",
            sa.String(length=32),
            sa.ForeignKey("templates.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.Integer(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "template_assets",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column(
            "template_id",
            sa.String(length=32),
            sa.ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(length=16), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index(
        "ix_template_assets_template_kind",
        "template_assets",
        ["template_id", "kind", "sort_order"],
    )

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.Text()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )


def downgrade() -> None:
    op.drop_table("user_profiles")
    op.drop_index("ix_template_assets_template_kind", table_name="template_assets")
    op.drop_table("template_assets")
    op.drop_table("template_tags")
    op.drop_table("tags")
    op.drop_constraint("fk_templates_current_version", "templates", type_="foreignkey")
    op.drop_table("template_versions")
    op.drop_table("templates")
