"""Initial tables for echo_tales service"""

import sqlalchemy as sa

from alembic import op

revision = '20241018_init_echo_tales'
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=255), nullable=False, unique=True),
        sa.Column('password', sa.String(length=255), nullable=False),
    )
    op.create_table(
        'voices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('voice_id', sa.String(length=255), nullable=False),
        sa.Column('gender', sa.String(length=50), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column(
            'is_default',
            sa.Boolean(),
            nullable=False,
            server_default=sa.text('false'),
        ),
    )
    op.create_table(
        'narrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('voice_id', sa.Integer(), sa.ForeignKey('voices.id')),
        sa.Column('emotion', sa.String(length=50), nullable=False),
        sa.Column('speed', sa.String(length=20), nullable=False),
        sa.Column('pitch', sa.String(length=20), nullable=False),
        sa.Column('audio_url', sa.String(length=1024)),
        sa.Column('created_at', sa.String(length=64), nullable=False),
    )

def downgrade() -> None:
    op.drop_table('narrations')
    op.drop_table('voices')
    op.drop_table('users')
