"""Create accounts, books and ratings tables

Revision ID: 3f1c2a9b7d40
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9b7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STARS = (1, 2, 3, 4, 5)


def upgrade() -> None:
    op.create_table('accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), comment='Whether the account may use the API'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false(), comment='Whether the account may create and delete books'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_accounts_username'), 'accounts', ['username'], unique=True)
    op.create_index(op.f('ix_accounts_email'), 'accounts', ['email'], unique=True)

    op.create_table('books',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('isbn13', sa.String(length=13), nullable=False, comment='13-digit ISBN'),
        sa.Column('authors', sa.Text(), nullable=False, comment='Comma-separated author names'),
        sa.Column('publication_year', sa.Integer(), nullable=True, comment='Year of original publication'),
        sa.Column('original_title', sa.Text(), nullable=True, comment='Title of the first edition'),
        sa.Column('title', sa.Text(), nullable=False, comment='Title of this edition'),
        sa.Column('image_url', sa.Text(), nullable=True, comment='Large cover image URL'),
        sa.Column('image_small_url', sa.Text(), nullable=True, comment='Small cover image URL'),
        sa.Column('rating_avg', sa.Float(), nullable=False, server_default='0', comment='Mean star rating, 0 when unrated'),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0', comment='Number of ratings'),
        *[
            sa.Column(f'rating_{star}_star', sa.Integer(), nullable=False, server_default='0')
            for star in STARS
        ],
        sa.CheckConstraint('rating_count >= 0', name='ck_books_rating_count'),
        sa.CheckConstraint('rating_avg >= 0 AND rating_avg <= 5', name='ck_books_rating_avg'),
        *[
            sa.CheckConstraint(f'rating_{star}_star >= 0', name=f'ck_books_rating_{star}_star')
            for star in STARS
        ],
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_books_isbn13'), 'books', ['isbn13'], unique=True)
    op.create_index(op.f('ix_books_rating_avg'), 'books', ['rating_avg'], unique=False)

    op.create_table('ratings',
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('book_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False, comment='Rating from 1-5 stars'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_ratings_rating_range'),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('account_id', 'book_id')
    )
    op.create_index(op.f('ix_ratings_book_id'), 'ratings', ['book_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_ratings_book_id'), table_name='ratings')
    op.drop_table('ratings')
    op.drop_index(op.f('ix_books_rating_avg'), table_name='books')
    op.drop_index(op.f('ix_books_isbn13'), table_name='books')
    op.drop_table('books')
    op.drop_index(op.f('ix_accounts_email'), table_name='accounts')
    op.drop_index(op.f('ix_accounts_username'), table_name='accounts')
    op.drop_table('accounts')
