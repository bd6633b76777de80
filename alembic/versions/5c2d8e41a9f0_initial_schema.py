"""initial_schema

Crea las tablas del cotizador: usuarios, clientes, categorías, recursos,
ítems compuestos (con su composición), presupuestos (con sus líneas) y la
lista heredada de materiales.

Revision ID: 5c2d8e41a9f0
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c2d8e41a9f0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(200), nullable=False),
        sa.Column('password_hash', sa.String(200), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('ruc', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_clients_ruc', 'clients', ['ruc'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('default_margin', sa.Numeric(5, 2), nullable=False, server_default='20'),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_categories_order', 'categories', ['order'])

    op.create_table(
        'resources',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('price', sa.Numeric(14, 4), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('last_updated', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_resources_name', 'resources', ['name'])
    op.create_index('ix_resources_type', 'resources', ['type'])
    op.create_index('ix_resources_category_id', 'resources', ['category_id'])

    op.create_table(
        'composite_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('custom_margin', sa.Numeric(5, 2), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_composite_items_name', 'composite_items', ['name'])
    op.create_index('ix_composite_items_category_id', 'composite_items', ['category_id'])

    op.create_table(
        'composite_item_components',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'composite_item_id',
            sa.Integer(),
            sa.ForeignKey('composite_items.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('resource_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Numeric(14, 4), nullable=False),
    )
    op.create_index(
        'ix_composite_item_components_composite_item_id',
        'composite_item_components', ['composite_item_id'],
    )
    op.create_index(
        'ix_composite_item_components_resource_id',
        'composite_item_components', ['resource_id'],
    )

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('budget_number', sa.String(30), nullable=False, unique=True),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('project_name', sa.String(300), nullable=True),
        sa.Column('project_description', sa.Text(), nullable=True),
        sa.Column('subtotal', sa.Numeric(20, 8), nullable=False, server_default='0'),
        sa.Column('iva', sa.Numeric(20, 8), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(20, 8), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('valid_until', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_budgets_client_id', 'budgets', ['client_id'])
    op.create_index('ix_budgets_status', 'budgets', ['status'])
    op.create_index('ix_budgets_created_at', 'budgets', ['created_at'])

    op.create_table(
        'budget_items',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'budget_id',
            sa.Integer(),
            sa.ForeignKey('budgets.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('item_type', sa.String(20), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('composite_item_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(1000), nullable=False),
        sa.Column('quantity', sa.Numeric(14, 4), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 4), nullable=False),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('subtotal', sa.Numeric(20, 8), nullable=False),
    )
    op.create_index('ix_budget_items_budget_id', 'budget_items', ['budget_id'])

    op.create_table(
        'materials',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('price', sa.Numeric(14, 4), nullable=False),
        sa.Column('category', sa.String(200), nullable=True),
        sa.Column('last_updated', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_materials_name', 'materials', ['name'])
    op.create_index('ix_materials_category', 'materials', ['category'])


def downgrade() -> None:
    op.drop_table('materials')
    op.drop_table('budget_items')
    op.drop_table('budgets')
    op.drop_table('composite_item_components')
    op.drop_table('composite_items')
    op.drop_table('resources')
    op.drop_table('categories')
    op.drop_table('clients')
    op.drop_table('users')
