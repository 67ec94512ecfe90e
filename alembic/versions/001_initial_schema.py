"""Initial quiz engine schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )

    # One row per (user, session); rows past expires_at are treated as absent
    op.create_table(
        'user_state',
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('current_difficulty', sa.Integer(), nullable=False),
        sa.Column('current_score', sa.Integer(), nullable=False),
        sa.Column('current_streak', sa.Integer(), nullable=False),
        sa.Column('highest_streak', sa.Integer(), nullable=False),
        sa.Column('total_answered', sa.Integer(), nullable=False),
        sa.Column('total_correct', sa.Integer(), nullable=False),
        sa.Column('wrong_streak', sa.Integer(), nullable=False),
        sa.Column('ema_performance', sa.Float(), nullable=False),
        sa.Column('cooldown', sa.Integer(), nullable=False),
        sa.Column('current_question_id', sa.String(64), nullable=True),
        sa.Column('question_issued_at', sa.DateTime(), nullable=True),
        sa.Column('last_seen_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id', 'session_id', name='pk_user_state'),
        sa.CheckConstraint('current_score >= 0', name='ck_user_state_score_non_negative'),
        sa.CheckConstraint('total_correct <= total_answered', name='ck_user_state_correct_within_answered'),
    )
    op.create_index('ix_user_state_expires_at', 'user_state', ['expires_at'])

    op.create_table(
        'answer_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('question_id', sa.String(64), nullable=False),
        sa.Column('correct', sa.Boolean(), nullable=False),
        sa.Column('served_difficulty', sa.Integer(), nullable=False),
        sa.Column('score_delta', sa.Integer(), nullable=False),
        sa.Column('streak_after', sa.Integer(), nullable=False),
        sa.Column('new_difficulty', sa.Integer(), nullable=False),
        sa.Column('total_score_after', sa.Integer(), nullable=False),
        sa.Column('answered_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_answer_log'),
        sa.UniqueConstraint('user_id', 'session_id', 'question_id', name='uq_answer_log_user_session_question'),
    )
    op.create_index('ix_answer_log_session_recent', 'answer_log', ['user_id', 'session_id', 'answered_at'])

    op.create_table(
        'leaderboard_score',
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id', name='pk_leaderboard_score'),
    )
    op.create_index('ix_leaderboard_score_total_score', 'leaderboard_score', ['total_score'])

    op.create_table(
        'leaderboard_streak',
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('highest_streak', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id', name='pk_leaderboard_streak'),
    )
    op.create_index('ix_leaderboard_streak_highest_streak', 'leaderboard_streak', ['highest_streak'])

    op.create_table(
        'questions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('difficulty', sa.Integer(), nullable=False),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('choices', sa.JSON(), nullable=False),
        sa.Column('correct_answer_hash', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_questions'),
    )
    op.create_index('ix_questions_difficulty', 'questions', ['difficulty'])


def downgrade():
    op.drop_index('ix_questions_difficulty', table_name='questions')
    op.drop_table('questions')
    op.drop_index('ix_leaderboard_streak_highest_streak', table_name='leaderboard_streak')
    op.drop_table('leaderboard_streak')
    op.drop_index('ix_leaderboard_score_total_score', table_name='leaderboard_score')
    op.drop_table('leaderboard_score')
    op.drop_index('ix_answer_log_session_recent', table_name='answer_log')
    op.drop_table('answer_log')
    op.drop_index('ix_user_state_expires_at', table_name='user_state')
    op.drop_table('user_state')
    op.drop_table('users')
