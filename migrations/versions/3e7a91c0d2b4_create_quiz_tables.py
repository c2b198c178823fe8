"""Create users and shared quiz tables

Revision ID: 3e7a91c0d2b4
Revises:
Create Date: 2026-01-12 10:21:07.118342

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '3e7a91c0d2b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    inspector = inspect(op.get_bind())
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('full_name', sa.String(length=255), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Create quizzes table
    if 'quizzes' not in tables:
        op.create_table('quizzes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('creator_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
            sa.Column('available_from', sa.DateTime(), nullable=True),
            sa.Column('available_until', sa.DateTime(), nullable=True),
            sa.Column('is_published', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('share_id', sa.String(length=64), nullable=True),
            sa.Column('randomize_questions', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('randomize_options', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('max_attempts_per_ip', sa.Integer(), nullable=True),
            sa.Column('show_answers_after', sa.DateTime(), nullable=True),
            sa.Column('participant_fields', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quizzes_creator_id', 'quizzes', ['creator_id'], unique=False)
        op.create_index('ix_quizzes_is_published', 'quizzes', ['is_published'], unique=False)
        op.create_index('ix_quizzes_share_id', 'quizzes', ['share_id'], unique=True)
        op.create_index('ix_quizzes_created_at', 'quizzes', ['created_at'], unique=False)

    # Create quiz_questions table
    if 'quiz_questions' not in tables:
        op.create_table('quiz_questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('marks', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_questions_quiz_id', 'quiz_questions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_questions_order_index', 'quiz_questions', ['order_index'], unique=False)
        op.create_index('ix_quiz_questions_quiz_order', 'quiz_questions', ['quiz_id', 'order_index'], unique=False)

    # Create quiz_question_options table
    if 'quiz_question_options' not in tables:
        op.create_table('quiz_question_options',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('option_text', sa.Text(), nullable=False),
            sa.Column('is_correct', sa.Boolean(), nullable=False, server_default='0'),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['question_id'], ['quiz_questions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_question_options_question_id', 'quiz_question_options', ['question_id'], unique=False)
        op.create_index('ix_question_options_question_order', 'quiz_question_options', ['question_id', 'order_index'], unique=False)

    # Create quiz_submissions table
    if 'quiz_submissions' not in tables:
        op.create_table('quiz_submissions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('participant_data', sa.JSON(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_marks', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_questions', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('percentage', sa.Float(), nullable=False, server_default='0'),
            sa.Column('time_spent_seconds', sa.Integer(), nullable=True),
            sa.Column('ip_address', sa.String(length=64), nullable=True),
            sa.Column('submitted_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_submissions_quiz_id', 'quiz_submissions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_submissions_submitted_at', 'quiz_submissions', ['submitted_at'], unique=False)
        op.create_index('ix_quiz_submissions_quiz_ip', 'quiz_submissions', ['quiz_id', 'ip_address'], unique=False)

    # Create quiz_answers table
    if 'quiz_answers' not in tables:
        op.create_table('quiz_answers',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('submission_id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=True),
            sa.Column('selected_option_id', sa.Integer(), nullable=True),
            sa.Column('is_correct', sa.Boolean(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['submission_id'], ['quiz_submissions.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['question_id'], ['quiz_questions.id'], ondelete='SET NULL'),
            sa.ForeignKeyConstraint(['selected_option_id'], ['quiz_question_options.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_answers_submission_id', 'quiz_answers', ['submission_id'], unique=False)
        op.create_index('ix_quiz_answers_question_id', 'quiz_answers', ['question_id'], unique=False)


def downgrade():
    op.drop_index('ix_quiz_answers_question_id', table_name='quiz_answers')
    op.drop_index('ix_quiz_answers_submission_id', table_name='quiz_answers')
    op.drop_table('quiz_answers')

    op.drop_index('ix_quiz_submissions_quiz_ip', table_name='quiz_submissions')
    op.drop_index('ix_quiz_submissions_submitted_at', table_name='quiz_submissions')
    op.drop_index('ix_quiz_submissions_quiz_id', table_name='quiz_submissions')
    op.drop_table('quiz_submissions')

    op.drop_index('ix_question_options_question_order', table_name='quiz_question_options')
    op.drop_index('ix_quiz_question_options_question_id', table_name='quiz_question_options')
    op.drop_table('quiz_question_options')

    op.drop_index('ix_quiz_questions_quiz_order', table_name='quiz_questions')
    op.drop_index('ix_quiz_questions_order_index', table_name='quiz_questions')
    op.drop_index('ix_quiz_questions_quiz_id', table_name='quiz_questions')
    op.drop_table('quiz_questions')

    op.drop_index('ix_quizzes_created_at', table_name='quizzes')
    op.drop_index('ix_quizzes_share_id', table_name='quizzes')
    op.drop_index('ix_quizzes_is_published', table_name='quizzes')
    op.drop_index('ix_quizzes_creator_id', table_name='quizzes')
    op.drop_table('quizzes')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
