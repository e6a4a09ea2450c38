"""create_classroom_quiz_tables

Revision ID: 3c1a9e7d5b20
Revises:
Create Date: 2026-10-18 10:12:04.518337

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1a9e7d5b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """퀴즈/방/참가자/답안 테이블 생성"""
    op.create_table(
        'quizzes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('teacher_id', sa.String(length=64), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('quiz_type', sa.String(length=20), nullable=False),
        sa.Column('procedural_subtype', sa.String(length=40), nullable=True),
        sa.Column('question_count', sa.Integer(), nullable=True),
        sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_quizzes_teacher_id'), 'quizzes', ['teacher_id'], unique=False)

    op.create_table(
        'static_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_type', sa.String(length=30), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('wrong_answers', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('quiz_id', 'order_index', name='uq_static_questions_quiz_order'),
    )
    op.create_index(op.f('ix_static_questions_quiz_id'), 'static_questions', ['quiz_id'], unique=False)

    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_code', sa.String(length=6), nullable=False),
        sa.Column('teacher_id', sa.String(length=64), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('class_name', sa.String(length=100), nullable=True),
        sa.Column('grade_level', sa.Integer(), nullable=True),
        sa.Column('question_mode', sa.String(length=20), nullable=False),
        sa.Column('time_limit_per_question', sa.Integer(), nullable=True),
        sa.Column('randomize_questions', sa.Boolean(), nullable=False),
        sa.Column('randomize_answers', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_question_index', sa.Integer(), nullable=True),
        sa.Column('question_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('show_results', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rooms_room_code'), 'rooms', ['room_code'], unique=False)
    op.create_index(op.f('ix_rooms_teacher_id'), 'rooms', ['teacher_id'], unique=False)
    # 활성 방 사이에서만 참여 코드 유일
    op.create_index(
        'uq_rooms_active_room_code',
        'rooms',
        ['room_code'],
        unique=True,
        postgresql_where=sa.text('is_active'),
    )

    op.create_table(
        'room_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('question_index', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('answers', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('room_id', 'question_index', name='uq_room_questions_room_index'),
    )
    op.create_index(op.f('ix_room_questions_room_id'), 'room_questions', ['room_id'], unique=False)

    op.create_table(
        'participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('room_id', sa.Integer(), nullable=False),
        sa.Column('student_name', sa.String(length=50), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_participants_room_id'), 'participants', ['room_id'], unique=False)

    op.create_table(
        'answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('question_index', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('given_answer', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('time_taken_seconds', sa.Integer(), nullable=True),
        sa.Column('answered_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'question_index', name='uq_answers_participant_question'),
    )
    op.create_index(op.f('ix_answers_participant_id'), 'answers', ['participant_id'], unique=False)


def downgrade() -> None:
    """퀴즈/방/참가자/답안 테이블 제거"""
    op.drop_index(op.f('ix_answers_participant_id'), table_name='answers')
    op.drop_table('answers')
    op.drop_index(op.f('ix_participants_room_id'), table_name='participants')
    op.drop_table('participants')
    op.drop_index(op.f('ix_room_questions_room_id'), table_name='room_questions')
    op.drop_table('room_questions')
    op.drop_index('uq_rooms_active_room_code', table_name='rooms')
    op.drop_index(op.f('ix_rooms_teacher_id'), table_name='rooms')
    op.drop_index(op.f('ix_rooms_room_code'), table_name='rooms')
    op.drop_table('rooms')
    op.drop_index(op.f('ix_static_questions_quiz_id'), table_name='static_questions')
    op.drop_table('static_questions')
    op.drop_index(op.f('ix_quizzes_teacher_id'), table_name='quizzes')
    op.drop_table('quizzes')
