"""create_exam_catalog_tables

Revision ID: create_exam_catalog_tables
Revises:
Create Date: 2026-10-18 09:00:00.000000

This migration creates the examination schema:
- school_classes: JSS1-SS3 class years
- subjects / subject_classes: subject catalog (level, departments, category) and its class links
- students: students who sit exams
- exam_instances / exam_attempts: scheduled exams and student attempts
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_exam_catalog_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


CLASS_NAMES = ('JSS1', 'JSS2', 'JSS3', 'SS1', 'SS2', 'SS3')


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'school_classes',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Enum(*CLASS_NAMES, name='classname'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('academic_year', sa.String(length=9), nullable=True),
        sa.Column('max_students', sa.Integer(), nullable=False, server_default='40'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_school_classes_name', 'school_classes', ['name'], unique=True)

    op.create_table(
        'subjects',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('level', sa.Enum('JUNIOR', 'SENIOR', 'BOTH', name='schoollevel'), nullable=False),
        sa.Column('departments', sa.JSON(), nullable=False),
        sa.Column('applicable_levels', sa.JSON(), nullable=False),
        sa.Column('passing_score', sa.Integer(), nullable=False, server_default='40'),
        sa.Column(
            'category',
            sa.Enum(
                'CORE', 'SCIENCE', 'COMMERCIAL', 'ARTS', 'TECHNICAL',
                'LANGUAGE', 'RELIGIOUS', 'CREATIVE', 'SOCIAL', 'ELECTIVE',
                name='subjectcategory',
            ),
            nullable=False,
            server_default='CORE',
        ),
        sa.Column('is_core', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_compulsory', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('credits', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
        sa.CheckConstraint('credits BETWEEN 1 AND 6', name='ck_subject_credits_range'),
    )
    op.create_index('ix_subjects_name', 'subjects', ['name'])
    op.create_index('ix_subjects_level', 'subjects', ['level'])
    op.create_index('ix_subjects_category', 'subjects', ['category'])

    op.create_table(
        'subject_classes',
        sa.Column('subject_id', sa.BigInteger(), nullable=False),
        sa.Column('class_id', sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('subject_id', 'class_id'),
    )

    op.create_table(
        'students',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('admission_number', sa.String(length=50), nullable=True),
        sa.Column('class_id', sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admission_number'),
    )
    op.create_index('ix_students_class_id', 'students', ['class_id'])

    op.create_table(
        'exam_instances',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('exam_code', sa.String(length=12), nullable=False),
        sa.Column('subject_id', sa.BigInteger(), nullable=False),
        sa.Column('class_id', sa.BigInteger(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_marks', sa.Integer(), nullable=False),
        sa.Column('passing_marks', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_time < end_time', name='ck_exam_window_ordered'),
    )
    op.create_index('ix_exam_instances_exam_code', 'exam_instances', ['exam_code'], unique=True)
    op.create_index('ix_exam_instances_subject_id', 'exam_instances', ['subject_id'])
    op.create_index('ix_exam_instances_class_id', 'exam_instances', ['class_id'])
    op.create_index('ix_exam_instances_start_time', 'exam_instances', ['start_time'])
    op.create_index('ix_exam_instances_end_time', 'exam_instances', ['end_time'])

    op.create_table(
        'exam_attempts',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('exam_id', sa.BigInteger(), nullable=False),
        sa.Column('student_id', sa.BigInteger(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'grading_status',
            sa.Enum('PENDING', 'PARTIAL', 'COMPLETED', name='gradingstatus'),
            nullable=False,
            server_default='PENDING',
        ),
        sa.Column('score', sa.DECIMAL(10, 2), nullable=False, server_default='0'),
        sa.Column('percentage', sa.DECIMAL(5, 2), nullable=True),
        sa.Column('actual_score', sa.DECIMAL(10, 2), nullable=True),
        sa.Column('actual_percentage', sa.DECIMAL(5, 2), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['exam_id'], ['exam_instances.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exam_id', 'student_id', name='uq_attempt_exam_student'),
    )
    op.create_index('ix_exam_attempts_exam_id', 'exam_attempts', ['exam_id'])
    op.create_index('ix_exam_attempts_student_id', 'exam_attempts', ['student_id'])


def downgrade() -> None:
    op.drop_table('exam_attempts')
    op.drop_table('exam_instances')
    op.drop_table('students')
    op.drop_table('subject_classes')
    op.drop_table('subjects')
    op.drop_table('school_classes')

    sa.Enum(name='gradingstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='subjectcategory').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='schoollevel').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='classname').drop(op.get_bind(), checkfirst=True)
