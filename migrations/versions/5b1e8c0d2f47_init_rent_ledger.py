"""家賃台帳の初期スキーマ

Revision ID: 5b1e8c0d2f47
Revises:
Create Date: 2026-10-19 11:40:00.000000

"""
from alembic import op
import sqlalchemy as sa


# Alembic が利用するリビジョン識別子。
revision = '5b1e8c0d2f47'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    ]


def upgrade():
    op.create_table('user',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('password_hash', sa.String(length=255), nullable=False),
    sa.Column('role', sa.String(length=50), nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_email'), ['email'], unique=True)

    op.create_table('property',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=120), nullable=False),
    sa.Column('address', sa.String(length=255), nullable=False),
    sa.Column('total_flats', sa.Integer(), nullable=False),
    sa.Column('note', sa.Text(), nullable=True),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('tenant',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=120), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('phone', sa.String(length=50), nullable=True),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('lease',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('property_id', sa.Integer(), nullable=False),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('monthly_rent', sa.Numeric(precision=10, scale=2), nullable=False),
    sa.Column('units', sa.Integer(), nullable=False),
    sa.Column('start_date', sa.Date(), nullable=True),
    sa.Column('end_date', sa.Date(), nullable=True),
    sa.Column('status', sa.String(length=50), nullable=True),
    *_timestamps(),
    sa.ForeignKeyConstraint(['property_id'], ['property.id'], ),
    sa.ForeignKeyConstraint(['tenant_id'], ['tenant.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('rent_payment',
    sa.Column('id', sa.String(length=160), nullable=False),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('lease_id', sa.Integer(), nullable=False),
    sa.Column('property_id', sa.Integer(), nullable=True),
    sa.Column('month', sa.String(length=12), nullable=False),
    sa.Column('year', sa.Integer(), nullable=False),
    sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('due_date', sa.Date(), nullable=True),
    sa.Column('payment_method', sa.String(length=50), nullable=True),
    sa.Column('paid_date', sa.Date(), nullable=True),
    sa.Column('original_amount', sa.Numeric(precision=10, scale=2), nullable=True),
    sa.Column('remaining_due', sa.Numeric(precision=10, scale=2), nullable=False),
    *_timestamps(),
    sa.ForeignKeyConstraint(['lease_id'], ['lease.id'], ),
    sa.ForeignKeyConstraint(['property_id'], ['property.id'], ),
    sa.ForeignKeyConstraint(['tenant_id'], ['tenant.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('tenant_id', 'lease_id', 'month', 'year', name='uq_rent_payment_period')
    )
    with op.batch_alter_table('rent_payment', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_rent_payment_lease_id'), ['lease_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_rent_payment_tenant_id'), ['tenant_id'], unique=False)


def downgrade():
    with op.batch_alter_table('rent_payment', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_rent_payment_tenant_id'))
        batch_op.drop_index(batch_op.f('ix_rent_payment_lease_id'))

    op.drop_table('rent_payment')
    op.drop_table('lease')
    op.drop_table('tenant')
    op.drop_table('property')
    with op.batch_alter_table('user', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_email'))

    op.drop_table('user')
