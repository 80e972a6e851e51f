"""create_registration_tables

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2025-08-14

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c1f9a2b7d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table('teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.UniqueConstraint('code')
    )

    op.create_table('programs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.Enum('stage', 'non-stage', name='programtype'), nullable=False),
        sa.Column('participation_type', sa.Enum('group', 'individual', name='participationtype'), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('full_name_key', sa.String(length=100), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('unique_code', sa.String(length=20), nullable=False),
        sa.Column('profile_image', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('unique_code')
    )
    op.create_index(op.f('ix_participants_full_name_key'), 'participants', ['full_name_key'], unique=False)

    op.create_table('registrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('program_id', sa.Integer(), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'program_id', name='uq_registration_per_participant')
    )
    op.create_index(op.f('ix_registrations_participant_id'), 'registrations', ['participant_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_registrations_participant_id'), table_name='registrations')
    op.drop_table('registrations')
    op.drop_index(op.f('ix_participants_full_name_key'), table_name='participants')
    op.drop_table('participants')
    op.drop_table('programs')
    op.drop_table('teams')
    op.execute("DROP TYPE IF EXISTS programtype")
    op.execute("DROP TYPE IF EXISTS participationtype")
