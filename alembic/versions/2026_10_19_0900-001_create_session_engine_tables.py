"""Create workout session engine tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AutoString = sqlmodel.sql.sqltypes.AutoString


def upgrade() -> None:
    """Create sessions, logs, adaptive, analytics and achievement tables."""
    op.create_table('workout_sessions', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', AutoString(length=64), nullable=False),
        sa.Column('workout_id', AutoString(length=100), nullable=False),
        sa.Column('state', AutoString(length=20), nullable=False),
        sa.Column('current_phase', AutoString(length=20), nullable=True),
        sa.Column('current_exercise_index', sa.Integer(), nullable=False),
        sa.Column('current_set_index', sa.Integer(), nullable=False),
        sa.Column('phase_started_at', sa.DateTime(), nullable=True),
        sa.Column('has_warmup', sa.Boolean(), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('paused_at', sa.DateTime(), nullable=True),
        sa.Column('resumed_at', sa.DateTime(), nullable=True),
        sa.Column('paused_from_state', AutoString(length=20), nullable=True),
        sa.Column('total_paused_seconds', sa.Integer(), nullable=False),
        sa.Column('pause_intervals', sa.JSON(), nullable=False),
        sa.Column('total_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('active_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('warmup_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('cooldown_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('total_exercises', sa.Integer(), nullable=False),
        sa.Column('total_sets', sa.Integer(), nullable=False),
        sa.Column('exercises_completed', sa.Integer(), nullable=False),
        sa.Column('sets_completed', sa.Integer(), nullable=False),
        sa.Column('total_volume_kg', sa.Float(), nullable=False),
        sa.Column('total_reps', sa.Integer(), nullable=False),
        sa.Column('calories_burned', sa.Integer(), nullable=False),
        sa.Column('completion_percentage', sa.Float(), nullable=False),
        sa.Column('performance_score', sa.Integer(), nullable=True),
        sa.Column('rest_target_seconds', sa.Integer(), nullable=True),
        sa.Column('rest_periods_skipped', sa.Integer(), nullable=False),
        sa.Column('rest_shortfall_seconds', sa.Integer(), nullable=False),
        sa.Column('realtime', sa.JSON(), nullable=False),
        sa.Column('difficulty_rating', sa.Integer(), nullable=True),
        sa.Column('energy_level', sa.Integer(), nullable=True),
        sa.Column('mood_rating', sa.Integer(), nullable=True),
        sa.Column('notes', AutoString(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_workout_sessions_user_id'), 'workout_sessions', ['user_id'], unique=False)
    op.create_index(op.f('ix_workout_sessions_workout_id'), 'workout_sessions', ['workout_id'], unique=False)
    op.create_index(op.f('ix_workout_sessions_state'), 'workout_sessions', ['state'], unique=False)
    op.create_index(op.f('ix_workout_sessions_completed_at'), 'workout_sessions', ['completed_at'], unique=False)

    op.create_table('exercise_logs', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('exercise_id', AutoString(length=100), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('status', AutoString(length=20), nullable=False),
        sa.Column('target_sets', sa.Integer(), nullable=False),
        sa.Column('target_reps', sa.Integer(), nullable=True),
        sa.Column('target_weight_kg', sa.Float(), nullable=True),
        sa.Column('target_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('target_rest_seconds', sa.Integer(), nullable=False),
        sa.Column('completed_sets', sa.Integer(), nullable=False),
        sa.Column('total_volume_kg', sa.Float(), nullable=False),
        sa.Column('total_reps', sa.Integer(), nullable=False),
        sa.Column('average_rpe', sa.Float(), nullable=True),
        sa.Column('peak_rpe', sa.Integer(), nullable=True),
        sa.Column('form_quality_average', sa.Float(), nullable=True),
        sa.Column('skip_reason', AutoString(length=50), nullable=True),
        sa.Column('skip_notes', AutoString(length=1000), nullable=True),
        sa.Column('alternative_exercise_id', AutoString(length=100), nullable=True),
        sa.Column('alternative_was_completed', sa.Boolean(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'order_index', name='uq_exercise_log_session_order'))
    op.create_index(op.f('ix_exercise_logs_session_id'), 'exercise_logs', ['session_id'], unique=False)
    op.create_index(op.f('ix_exercise_logs_exercise_id'), 'exercise_logs', ['exercise_id'], unique=False)

    op.create_table('set_logs', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('exercise_log_id', sa.Integer(), nullable=False),
        sa.Column('set_number', sa.Integer(), nullable=False),
        sa.Column('set_type', AutoString(length=20), nullable=False),
        sa.Column('reps_target', sa.Integer(), nullable=True),
        sa.Column('reps_completed', sa.Integer(), nullable=False),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('duration_target_seconds', sa.Integer(), nullable=True),
        sa.Column('duration_actual_seconds', sa.Integer(), nullable=True),
        sa.Column('rest_target_seconds', sa.Integer(), nullable=True),
        sa.Column('rest_actual_seconds', sa.Integer(), nullable=True),
        sa.Column('rest_quality', sa.Integer(), nullable=True),
        sa.Column('rpe', sa.Integer(), nullable=True),
        sa.Column('form_quality', sa.Integer(), nullable=True),
        sa.Column('was_failure', sa.Boolean(), nullable=False),
        sa.Column('tempo', AutoString(length=20), nullable=True),
        sa.Column('time_under_tension_seconds', sa.Integer(), nullable=True),
        sa.Column('notes', AutoString(length=500), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['exercise_log_id'], ['exercise_logs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exercise_log_id', 'set_number', name='uq_set_log_exercise_set'))
    op.create_index(op.f('ix_set_logs_exercise_log_id'), 'set_logs', ['exercise_log_id'], unique=False)

    op.create_table('adaptive_user_metrics', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', AutoString(length=64), nullable=False),
        sa.Column('exercise_id', AutoString(length=100), nullable=False),
        sa.Column('preferred_rest_seconds', sa.Integer(), nullable=False),
        sa.Column('rest_seconds_variance', sa.Float(), nullable=False),
        sa.Column('optimal_rep_range_min', sa.Integer(), nullable=True),
        sa.Column('optimal_rep_range_max', sa.Integer(), nullable=True),
        sa.Column('last_1rm_estimate_kg', sa.Float(), nullable=True),
        sa.Column('strength_progression_rate', sa.Float(), nullable=True),
        sa.Column('total_volume_lifetime_kg', sa.Float(), nullable=False),
        sa.Column('total_sessions', sa.Integer(), nullable=False),
        sa.Column('total_sets', sa.Integer(), nullable=False),
        sa.Column('total_reps', sa.Integer(), nullable=False),
        sa.Column('average_rpe', sa.Float(), nullable=True),
        sa.Column('average_form_quality', sa.Float(), nullable=True),
        sa.Column('consistency_score', sa.Float(), nullable=True),
        sa.Column('times_planned', sa.Integer(), nullable=False),
        sa.Column('times_skipped', sa.Integer(), nullable=False),
        sa.Column('skip_rate', sa.Float(), nullable=False),
        sa.Column('model_version', AutoString(length=20), nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=False),
        sa.Column('last_calculated_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'exercise_id', name='uq_adaptive_metric_user_exercise'))
    op.create_index(op.f('ix_adaptive_user_metrics_user_id'), 'adaptive_user_metrics', ['user_id'], unique=False)
    op.create_index(op.f('ix_adaptive_user_metrics_exercise_id'), 'adaptive_user_metrics', ['exercise_id'],
                    unique=False)

    op.create_table('exercise_recommendations', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', AutoString(length=64), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.Column('original_exercise_id', AutoString(length=100), nullable=False),
        sa.Column('recommended_exercise_id', AutoString(length=100), nullable=False),
        sa.Column('recommendation_type', AutoString(length=20), nullable=False),
        sa.Column('reason', AutoString(length=255), nullable=False),
        sa.Column('trigger_event', AutoString(length=30), nullable=False),
        sa.Column('confidence', sa.Float(), nullable=False),
        sa.Column('model_version', AutoString(length=20), nullable=False),
        sa.Column('was_shown', sa.Boolean(), nullable=False),
        sa.Column('was_accepted', sa.Boolean(), nullable=True),
        sa.Column('feedback_score', sa.Integer(), nullable=True),
        sa.Column('user_feedback', AutoString(length=500), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_exercise_recommendations_user_id'), 'exercise_recommendations', ['user_id'],
                    unique=False)
    op.create_index(op.f('ix_exercise_recommendations_original_exercise_id'), 'exercise_recommendations',
                    ['original_exercise_id'], unique=False)

    op.create_table('session_analytics', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('user_id', AutoString(length=64), nullable=False),
        sa.Column('workout_id', AutoString(length=100), nullable=False),
        sa.Column('total_volume_kg', sa.Float(), nullable=False),
        sa.Column('volume_per_exercise', sa.JSON(), nullable=False),
        sa.Column('average_weight_kg', sa.Float(), nullable=True),
        sa.Column('total_reps', sa.Integer(), nullable=False),
        sa.Column('total_sets', sa.Integer(), nullable=False),
        sa.Column('average_reps_per_set', sa.Float(), nullable=True),
        sa.Column('average_intensity', sa.Float(), nullable=False),
        sa.Column('average_rpe', sa.Float(), nullable=True),
        sa.Column('total_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('active_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('time_under_tension_seconds', sa.Integer(), nullable=False),
        sa.Column('average_rest_seconds', sa.Float(), nullable=True),
        sa.Column('work_to_rest_ratio', sa.Float(), nullable=True),
        sa.Column('calories_burned', sa.Integer(), nullable=False),
        sa.Column('calorie_calculation_method', AutoString(length=30), nullable=False),
        sa.Column('performance_score', sa.Integer(), nullable=False),
        sa.Column('score_breakdown', sa.JSON(), nullable=False),
        sa.Column('degraded_factors', sa.JSON(), nullable=False),
        sa.Column('average_form_quality', sa.Float(), nullable=True),
        sa.Column('exercises_with_poor_form', sa.JSON(), nullable=False),
        sa.Column('completion_rate', sa.Float(), nullable=False),
        sa.Column('exercises_skipped', sa.Integer(), nullable=False),
        sa.Column('sets_to_failure', sa.Integer(), nullable=False),
        sa.Column('vs_previous_session', sa.JSON(), nullable=False),
        sa.Column('recovery_estimate_hours', sa.Integer(), nullable=False),
        sa.Column('insights', sa.JSON(), nullable=False),
        sa.Column('calculated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_session_analytics_session_id'), 'session_analytics', ['session_id'], unique=True)
    op.create_index(op.f('ix_session_analytics_user_id'), 'session_analytics', ['user_id'], unique=False)
    op.create_index(op.f('ix_session_analytics_workout_id'), 'session_analytics', ['workout_id'], unique=False)

    op.create_table('achievement_unlocks', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', AutoString(length=64), nullable=False),
        sa.Column('achievement_id', AutoString(length=50), nullable=False),
        sa.Column('category', AutoString(length=20), nullable=False),
        sa.Column('rarity', AutoString(length=20), nullable=False),
        sa.Column('title', AutoString(length=100), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=True),
        sa.Column('unlocked_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'achievement_id', name='uq_achievement_unlock_user_achievement'))
    op.create_index(op.f('ix_achievement_unlocks_user_id'), 'achievement_unlocks', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop all session engine tables."""
    op.drop_index(op.f('ix_achievement_unlocks_user_id'), table_name='achievement_unlocks')
    op.drop_table('achievement_unlocks')
    op.drop_index(op.f('ix_session_analytics_workout_id'), table_name='session_analytics')
    op.drop_index(op.f('ix_session_analytics_user_id'), table_name='session_analytics')
    op.drop_index(op.f('ix_session_analytics_session_id'), table_name='session_analytics')
    op.drop_table('session_analytics')
    op.drop_index(op.f('ix_exercise_recommendations_original_exercise_id'), table_name='exercise_recommendations')
    op.drop_index(op.f('ix_exercise_recommendations_user_id'), table_name='exercise_recommendations')
    op.drop_table('exercise_recommendations')
    op.drop_index(op.f('ix_adaptive_user_metrics_exercise_id'), table_name='adaptive_user_metrics')
    op.drop_index(op.f('ix_adaptive_user_metrics_user_id'), table_name='adaptive_user_metrics')
    op.drop_table('adaptive_user_metrics')
    op.drop_index(op.f('ix_set_logs_exercise_log_id'), table_name='set_logs')
    op.drop_table('set_logs')
    op.drop_index(op.f('ix_exercise_logs_exercise_id'), table_name='exercise_logs')
    op.drop_index(op.f('ix_exercise_logs_session_id'), table_name='exercise_logs')
    op.drop_table('exercise_logs')
    op.drop_index(op.f('ix_workout_sessions_completed_at'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_state'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_workout_id'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_user_id'), table_name='workout_sessions')
    op.drop_table('workout_sessions')
