"""create coupon tables

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a1c2e3f4b5d6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "coupons",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "discount_type", sa.String(length=20), nullable=False, server_default="percentage"
        ),
        sa.Column(
            "discount_value", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"
        ),
        sa.Column(
            "min_purchase_amount",
            sa.Numeric(precision=12, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column("max_discount_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("usage_limit", sa.Integer(), nullable=True),
        sa.Column("used_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column(
            "max_applications_per_order", sa.Integer(), nullable=False, server_default="1"
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )
    op.create_index("ix_coupons_code", "coupons", ["code"])
    op.create_index("ix_coupons_is_active", "coupons", ["is_active"])

    op.create_table(
        "coupon_rules",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("coupon_id", sa.String(length=36), nullable=False),
        sa.Column("rule_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rule_priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("source_type", sa.String(length=30), nullable=False, server_default="any"),
        sa.Column("source_category_id", sa.String(length=64), nullable=True),
        sa.Column("source_new_arrival_required", sa.Boolean(), nullable=True),
        sa.Column("source_min_quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("source_max_quantity", sa.Integer(), nullable=True),
        sa.Column("source_min_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("benefit_type", sa.String(length=30), nullable=False),
        sa.Column("target_category_id", sa.String(length=64), nullable=True),
        sa.Column("target_new_arrival_required", sa.Boolean(), nullable=True),
        sa.Column("free_quantity", sa.Integer(), nullable=True),
        sa.Column("free_item_selection", sa.String(length=20), nullable=True),
        sa.Column("free_discount_percentage", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("discount_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("discount_percentage", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("discount_target_type", sa.String(length=20), nullable=True),
        sa.Column("discount_target_category_id", sa.String(length=64), nullable=True),
        sa.Column("discount_target_new_arrival", sa.Boolean(), nullable=True),
        sa.Column("bundle_fixed_price", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_coupon_rules_coupon_id", "coupon_rules", ["coupon_id"])

    op.create_table(
        "coupon_applications",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("coupon_id", sa.String(length=36), nullable=False),
        sa.Column("rule_id", sa.String(length=36), nullable=True),
        sa.Column("order_id", sa.String(length=64), nullable=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column(
            "discount_amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"
        ),
        sa.Column(
            "original_amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"
        ),
        sa.Column(
            "final_amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"
        ),
        sa.Column("source_items", sa.JSON(), nullable=False),
        sa.Column("target_items", sa.JSON(), nullable=False),
        sa.Column("rule_description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_coupon_applications_coupon_id", "coupon_applications", ["coupon_id"])
    op.create_index("ix_coupon_applications_order_id", "coupon_applications", ["order_id"])


def downgrade() -> None:
    op.drop_index("ix_coupon_applications_order_id", table_name="coupon_applications")
    op.drop_index("ix_coupon_applications_coupon_id", table_name="coupon_applications")
    op.drop_table("coupon_applications")
    op.drop_index("ix_coupon_rules_coupon_id", table_name="coupon_rules")
    op.drop_table("coupon_rules")
    op.drop_index("ix_coupons_is_active", table_name="coupons")
    op.drop_index("ix_coupons_code", table_name="coupons")
    op.drop_table("coupons")
