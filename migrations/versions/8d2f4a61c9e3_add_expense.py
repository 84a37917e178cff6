"""物件ごとの支出テーブルを追加

Revision ID: 8d2f4a61c9e3
Revises: 5b1e8c0d2f47
Create Date: 2026-10-19 15:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# Alembic が利用するリビジョン識別子。
revision = '8d2f4a61c9e3'
down_revision = '5b1e8c0d2f47'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('expense',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('property_id', sa.Integer(), nullable=False),
    sa.Column('expense_date', sa.Date(), nullable=False),
    sa.Column('category', sa.String(length=60), nullable=False),
    sa.Column('description', sa.String(length=255), nullable=False),
    sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
    sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['property_id'], ['property.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('expense', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_expense_property_id'), ['property_id'], unique=False)


def downgrade():
    with op.batch_alter_table('expense', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_expense_property_id'))

    op.drop_table('expense')
