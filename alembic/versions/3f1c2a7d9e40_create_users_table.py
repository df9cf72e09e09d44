"""create_users_table

Revision ID: 3f1c2a7d9e40
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a7d9e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the users table with its credential fields."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('email_verification_token', sa.String(length=64), nullable=True),
        sa.Column('email_verification_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('email_verification_consumed_token', sa.String(length=64), nullable=True),
        sa.Column('forgot_password_token', sa.String(length=64), nullable=True),
        sa.Column('forgot_password_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refresh_token', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_email_verification_token', 'users', ['email_verification_token'])
    op.create_index('ix_users_email_verification_consumed_token', 'users', ['email_verification_consumed_token'])
    op.create_index('ix_users_forgot_password_token', 'users', ['forgot_password_token'])


def downgrade() -> None:
    """Drop the users table."""
    op.drop_index('ix_users_forgot_password_token', table_name='users')
    op.drop_index('ix_users_email_verification_consumed_token', table_name='users')
    op.drop_index('ix_users_email_verification_token', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
