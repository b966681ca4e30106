"""Add manufacturing items, milling forms and milling locations

Revision ID: 001_manufacturing_tables
Revises:
Create Date: 2026-10-16

- manufacturing_items: lifecycle record per appliance
- milling_forms: one instruction snapshot per milled item
- milling_locations: registry for the Start Milling picker
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_manufacturing_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create manufacturing tables."""
    op.create_table(
        'manufacturing_items',
        sa.Column('id', sa.String(36), nullable=False),
        # Upstream references
        sa.Column('lab_script_id', sa.String(36), nullable=True),
        sa.Column('lab_report_card_id', sa.String(36), nullable=True),
        sa.Column('patient_id', sa.String(36), nullable=True),
        # Case descriptors
        sa.Column('patient_name', sa.String(255), nullable=False),
        sa.Column('arch_type', sa.String(20), nullable=False),
        sa.Column('upper_appliance_type', sa.String(100), nullable=True),
        sa.Column('lower_appliance_type', sa.String(100), nullable=True),
        sa.Column('upper_appliance_number', sa.String(50), nullable=True),
        sa.Column('lower_appliance_number', sa.String(50), nullable=True),
        sa.Column('is_nightguard_needed', sa.String(3), nullable=False, server_default='no'),
        sa.Column('upper_nightguard_number', sa.String(50), nullable=True),
        sa.Column('lower_nightguard_number', sa.String(50), nullable=True),
        sa.Column('shade', sa.String(50), nullable=False),
        sa.Column('material', sa.String(100), nullable=True),
        sa.Column('screw', sa.String(100), nullable=True),
        sa.Column('manufacturing_method', sa.String(20), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        # Milling
        sa.Column('milling_location', sa.String(100), nullable=True),
        sa.Column('gingiva_color', sa.String(20), nullable=True),
        sa.Column('stained_and_glazed', sa.String(3), nullable=True),
        sa.Column('cementation', sa.String(3), nullable=True),
        sa.Column('additional_notes', sa.Text(), nullable=True),
        # Shipping
        sa.Column('tracking_number', sa.String(100), nullable=True),
        sa.Column('tracking_link', sa.String(500), nullable=True),
        # Printing completion
        sa.Column('printing_completed_at', sa.DateTime(), nullable=True),
        sa.Column('printing_completed_by', sa.String(36), nullable=True),
        sa.Column('printing_completed_by_name', sa.String(255), nullable=True),
        # Inspection
        sa.Column('print_quality', sa.String(4), nullable=True),
        sa.Column('physical_defects', sa.String(4), nullable=True),
        sa.Column('screw_access_channel', sa.String(4), nullable=True),
        sa.Column('mua_platform', sa.String(4), nullable=True),
        sa.Column('inspection_status', sa.String(10), nullable=True),
        sa.Column('inspection_completed_at', sa.DateTime(), nullable=True),
        sa.Column('inspection_completed_by', sa.String(36), nullable=True),
        sa.Column('inspection_completed_by_name', sa.String(255), nullable=True),
        # Audit
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('lab_script_id', 'lab_report_card_id', 'patient_id', 'patient_name',
                   'manufacturing_method', 'status', 'milling_location',
                   'inspection_status', 'created_at'):
        op.create_index(f'ix_manufacturing_items_{column}', 'manufacturing_items', [column])

    op.create_table(
        'milling_forms',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('manufacturing_item_id', sa.String(36), nullable=False),
        sa.Column('patient_name', sa.String(255), nullable=False),
        sa.Column('milling_location', sa.String(100), nullable=False),
        sa.Column('gingiva_color', sa.String(20), nullable=True),
        sa.Column('stained_and_glazed', sa.String(3), nullable=True),
        sa.Column('cementation', sa.String(3), nullable=True),
        sa.Column('additional_notes', sa.Text(), nullable=True),
        sa.Column('upper_appliance_type', sa.String(100), nullable=True),
        sa.Column('lower_appliance_type', sa.String(100), nullable=True),
        sa.Column('upper_appliance_number', sa.String(50), nullable=True),
        sa.Column('lower_appliance_number', sa.String(50), nullable=True),
        sa.Column('shade', sa.String(50), nullable=True),
        sa.Column('screw', sa.String(100), nullable=True),
        sa.Column('material', sa.String(100), nullable=True),
        sa.Column('arch_type', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['manufacturing_item_id'], ['manufacturing_items.id'], ondelete='CASCADE'),
    )
    # One snapshot per item
    op.create_index('ix_milling_forms_manufacturing_item_id', 'milling_forms',
                    ['manufacturing_item_id'], unique=True)

    op.create_table(
        'milling_locations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_milling_locations_name', 'milling_locations', ['name'], unique=True)


def downgrade():
    """Drop manufacturing tables."""
    op.drop_index('ix_milling_locations_name', table_name='milling_locations')
    op.drop_table('milling_locations')
    op.drop_index('ix_milling_forms_manufacturing_item_id', table_name='milling_forms')
    op.drop_table('milling_forms')
    for column in ('lab_script_id', 'lab_report_card_id', 'patient_id', 'patient_name',
                   'manufacturing_method', 'status', 'milling_location',
                   'inspection_status', 'created_at'):
        op.drop_index(f'ix_manufacturing_items_{column}', table_name='manufacturing_items')
    op.drop_table('manufacturing_items')
