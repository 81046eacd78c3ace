"""add plans, servers and active list tables

Revision ID: 20261019_iptv_core
Revises:
Create Date: 2026-10-19

Cria planos, servidores, livro-razão mensal de listas ativas
(único por servidor + usuário + mês) e a tabela de último acesso.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_iptv_core'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'plans',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('active_list_limit', sa.Integer(), nullable=True),  # NULL = ilimitado
        sa.Column('billing_type', sa.String(length=20), nullable=False, server_default='fixo'),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('duration_months', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint(
            'active_list_limit IS NULL OR active_list_limit > 0',
            name='ck_plans_active_list_limit_positive',
        ),
        sa.CheckConstraint('duration_months BETWEEN 1 AND 12', name='ck_plans_duration_months'),
    )
    op.create_index('ix_plans_name', 'plans', ['name'])
    op.create_index('ix_plans_active', 'plans', ['active'])

    op.create_table(
        'servers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('dns', sa.String(length=500), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('plans.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_servers_code', 'servers', ['code'], unique=True)
    op.create_index('ix_servers_plan_id', 'servers', ['plan_id'])

    op.create_table(
        'monthly_active_lists',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('server_code', sa.String(length=20), nullable=False),
        sa.Column('username', sa.String(length=200), nullable=False),
        sa.Column('reference_month', sa.String(length=7), nullable=False),
        sa.Column('first_seen_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_seen_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_agent', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('ip_address', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint(
            'server_code', 'username', 'reference_month',
            name='uq_monthly_active_lists_server_user_month',
        ),
    )
    op.create_index('ix_monthly_active_lists_reference_month', 'monthly_active_lists', ['reference_month'])
    op.create_index('ix_monthly_active_lists_last_seen_at', 'monthly_active_lists', ['last_seen_at'])
    op.create_index(
        'ix_monthly_active_lists_server_month_active',
        'monthly_active_lists',
        ['server_code', 'reference_month', 'active'],
    )
    op.create_index(
        'ix_monthly_active_lists_month_active',
        'monthly_active_lists',
        ['reference_month', 'active'],
    )

    op.create_table(
        'active_lists',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('server_code', sa.String(length=20), nullable=False),
        sa.Column('username', sa.String(length=200), nullable=False),
        sa.Column('user_agent', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('ip_address', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('last_access', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('server_code', 'username', name='uq_active_lists_server_user'),
    )
    op.create_index('ix_active_lists_last_access', 'active_lists', ['last_access'])
    op.create_index('ix_active_lists_is_active', 'active_lists', ['is_active'])


def downgrade() -> None:
    op.drop_table('active_lists')
    op.drop_table('monthly_active_lists')
    op.drop_table('servers')
    op.drop_table('plans')
