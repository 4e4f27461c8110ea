"""create products table

Revision ID: 3a91c2d4e7b0
Revises:
Create Date: 2026-01-12 10:14:02.118305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a91c2d4e7b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_name", sa.String(), nullable=False),
        sa.Column("brand_name", sa.String(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("prev_price", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("item_name", "brand_name", name="uq_products_item_brand"),
    )
    op.create_index("ix_products_id", "products", ["id"])


def downgrade():
    op.drop_index("ix_products_id", table_name="products")
    op.drop_table("products")
