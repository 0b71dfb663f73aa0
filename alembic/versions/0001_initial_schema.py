"""initial schema: users, machines, nc programs, versions, setup sheets

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:12:40.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('programmer', 'quality', 'operator', 'admin', name='user_role'), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'machines',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=255), nullable=False),
        sa.Column('manufacturer', sa.String(length=255), nullable=True),
        sa.Column('model', sa.String(length=255), nullable=True),
        sa.Column('status', sa.Enum('Online', 'Offline', 'Maintenance', name='machine_status'), nullable=False),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('serial_port', sa.String(length=64), nullable=True),
        sa.Column('capabilities', sa.JSON(), nullable=True),
        # 自动编号计数器，从 100 开始
        sa.Column('next_program_number', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_machines_name', 'machines', ['name'])

    op.create_table(
        'nc_programs',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('part_number', sa.String(length=64), nullable=False),
        sa.Column('revision', sa.String(length=32), nullable=False),
        sa.Column('machine_id', sa.String(length=36), sa.ForeignKey('machines.id'), nullable=False),
        sa.Column('operation', sa.String(length=255), nullable=False),
        sa.Column('material', sa.String(length=255), nullable=False),
        sa.Column('customer', sa.String(length=255), nullable=False),
        sa.Column('work_order', sa.String(length=64), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('Draft', 'In Review', 'Approved', 'Released', 'Obsolete', name='program_status'), nullable=False),
        sa.Column('author_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('approver_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('nc_code', sa.Text(), nullable=True),
        sa.Column('has_setup_sheet', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_modified', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_nc_programs_part_number', 'nc_programs', ['part_number'])
    op.create_index('ix_nc_programs_machine_id', 'nc_programs', ['machine_id'])
    op.create_index('ix_nc_programs_last_modified', 'nc_programs', ['last_modified'])

    op.create_table(
        'program_versions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('program_id', sa.String(length=36), sa.ForeignKey('nc_programs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('revision', sa.String(length=32), nullable=False),
        sa.Column('file_path', sa.String(length=1024), nullable=False),
        sa.Column('change_log', sa.Text(), nullable=True),
        sa.Column('created_by_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('program_id', 'version_number', name='uq_program_version_number'),
    )
    op.create_index('ix_program_versions_program_id', 'program_versions', ['program_id'])

    op.create_table(
        'setup_sheets',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('program_id', sa.String(length=36), sa.ForeignKey('nc_programs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('machine_id', sa.String(length=36), sa.ForeignKey('machines.id'), nullable=False),
        sa.Column('machine_type', sa.String(length=255), nullable=False),
        sa.Column('safety_checklist', sa.JSON(), nullable=False),
        sa.Column('created_by_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('approved_by_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_setup_sheets_program_id', 'setup_sheets', ['program_id'])

    # 装夹单子记录，随装夹单级联删除
    op.create_table(
        'tools',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('setup_sheet_id', sa.String(length=36), sa.ForeignKey('setup_sheets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tool_number', sa.Integer(), nullable=False),
        sa.Column('tool_name', sa.String(length=255), nullable=False),
        sa.Column('length', sa.Float(), nullable=False),
        sa.Column('offset_h', sa.Float(), nullable=False),
        sa.Column('offset_d', sa.Float(), nullable=False),
        sa.Column('comment', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_tools_setup_sheet_id', 'tools', ['setup_sheet_id'])

    op.create_table(
        'origin_offsets',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('setup_sheet_id', sa.String(length=36), sa.ForeignKey('setup_sheets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=32), nullable=False),
        sa.Column('x', sa.Float(), nullable=False),
        sa.Column('y', sa.Float(), nullable=False),
        sa.Column('z', sa.Float(), nullable=False),
        sa.Column('a', sa.Float(), nullable=False, server_default='0'),
        sa.Column('b', sa.Float(), nullable=False, server_default='0'),
        sa.Column('c', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index('ix_origin_offsets_setup_sheet_id', 'origin_offsets', ['setup_sheet_id'])

    op.create_table(
        'fixtures',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('setup_sheet_id', sa.String(length=36), sa.ForeignKey('setup_sheets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('fixture_id', sa.String(length=64), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('setup_description', sa.Text(), nullable=True),
    )
    op.create_index('ix_fixtures_setup_sheet_id', 'fixtures', ['setup_sheet_id'])

    op.create_table(
        'media',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('setup_sheet_id', sa.String(length=36), sa.ForeignKey('setup_sheets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Enum('image', 'video', name='media_type'), nullable=False),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('caption', sa.String(length=255), nullable=True),
        sa.Column('annotations', sa.JSON(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_media_setup_sheet_id', 'media', ['setup_sheet_id'])


def downgrade():
    for table in ('media', 'fixtures', 'origin_offsets', 'tools', 'setup_sheets',
                  'program_versions', 'nc_programs', 'machines', 'users'):
        op.drop_table(table)
    for enum_name in ('media_type', 'program_status', 'machine_status', 'user_role'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
