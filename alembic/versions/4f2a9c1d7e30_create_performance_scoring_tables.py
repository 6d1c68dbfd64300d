"""Create performance scoring tables

Revision ID: 4f2a9c1d7e30
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4f2a9c1d7e30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Directory
    op.create_table(
        'employees',
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['manager_id'], ['employees.employee_id']),
        sa.PrimaryKeyConstraint('employee_id')
    )
    op.create_index(op.f('ix_employees_employee_id'), 'employees', ['employee_id'], unique=False)
    op.create_index(op.f('ix_employees_user_id'), 'employees', ['user_id'], unique=False)
    op.create_index(op.f('ix_employees_manager_id'), 'employees', ['manager_id'], unique=False)

    # Catalog
    op.create_table(
        'company_kpis',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('kpi_name', sa.String(length=255), nullable=False),
        sa.Column('kpi_description', sa.Text(), nullable=True),
        sa.Column('measurement_unit', sa.String(length=50), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('target_type', sa.String(length=20), nullable=False),
        sa.Column('lifecycle_state', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_company_kpis_id'), 'company_kpis', ['id'], unique=False)
    op.create_index(op.f('ix_company_kpis_kpi_name'), 'company_kpis', ['kpi_name'], unique=False)
    op.create_index(op.f('ix_company_kpis_category'), 'company_kpis', ['category'], unique=False)
    op.create_index(op.f('ix_company_kpis_lifecycle_state'), 'company_kpis', ['lifecycle_state'], unique=False)

    op.create_table(
        'company_values',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('value_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lifecycle_state', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_company_values_id'), 'company_values', ['id'], unique=False)
    op.create_index(op.f('ix_company_values_lifecycle_state'), 'company_values', ['lifecycle_state'], unique=False)

    # Job templates
    op.create_table(
        'job_position_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('position_title', sa.String(length=255), nullable=False),
        sa.Column('department', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_job_position_templates_id'), 'job_position_templates', ['id'], unique=False)

    op.create_table(
        'job_template_kpis',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('job_template_id', sa.Integer(), nullable=False),
        sa.Column('kpi_id', sa.Integer(), nullable=False),
        sa.Column('target_value', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('weight_percentage', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.ForeignKeyConstraint(['job_template_id'], ['job_position_templates.id']),
        sa.ForeignKeyConstraint(['kpi_id'], ['company_kpis.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_job_template_kpis_id'), 'job_template_kpis', ['id'], unique=False)
    op.create_index(op.f('ix_job_template_kpis_job_template_id'), 'job_template_kpis', ['job_template_id'], unique=False)
    op.create_index(op.f('ix_job_template_kpis_kpi_id'), 'job_template_kpis', ['kpi_id'], unique=False)

    op.create_table(
        'job_template_values',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('job_template_id', sa.Integer(), nullable=False),
        sa.Column('value_id', sa.Integer(), nullable=False),
        sa.Column('weight_percentage', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.ForeignKeyConstraint(['job_template_id'], ['job_position_templates.id']),
        sa.ForeignKeyConstraint(['value_id'], ['company_values.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_job_template_values_id'), 'job_template_values', ['id'], unique=False)
    op.create_index(op.f('ix_job_template_values_job_template_id'), 'job_template_values', ['job_template_id'], unique=False)
    op.create_index(op.f('ix_job_template_values_value_id'), 'job_template_values', ['value_id'], unique=False)

    # Evaluations (written by the evaluation module, read here)
    op.create_table(
        'evaluations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('period_id', sa.Integer(), nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=True),
        sa.Column('evidence_rating', sa.Numeric(precision=4, scale=2), nullable=True),
        sa.Column('evidence_summary', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id']),
        sa.ForeignKeyConstraint(['manager_id'], ['employees.employee_id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_evaluations_id'), 'evaluations', ['id'], unique=False)
    op.create_index(op.f('ix_evaluations_employee_id'), 'evaluations', ['employee_id'], unique=False)
    op.create_index(op.f('ix_evaluations_period_id'), 'evaluations', ['period_id'], unique=False)
    op.create_index(op.f('ix_evaluations_created_at'), 'evaluations', ['created_at'], unique=False)

    op.create_table(
        'evaluation_kpi_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_id', sa.Integer(), nullable=False),
        sa.Column('kpi_id', sa.Integer(), nullable=False),
        sa.Column('target_value', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('achieved_value', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('score', sa.Numeric(precision=3, scale=1), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_id'], ['evaluations.id']),
        sa.ForeignKeyConstraint(['kpi_id'], ['company_kpis.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_evaluation_kpi_results_id'), 'evaluation_kpi_results', ['id'], unique=False)
    op.create_index(op.f('ix_evaluation_kpi_results_evaluation_id'), 'evaluation_kpi_results', ['evaluation_id'], unique=False)
    op.create_index(op.f('ix_evaluation_kpi_results_kpi_id'), 'evaluation_kpi_results', ['kpi_id'], unique=False)

    op.create_table(
        'evaluation_value_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_id', sa.Integer(), nullable=False),
        sa.Column('value_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Numeric(precision=3, scale=1), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_id'], ['evaluations.id']),
        sa.ForeignKeyConstraint(['value_id'], ['company_values.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_evaluation_value_results_id'), 'evaluation_value_results', ['id'], unique=False)
    op.create_index(op.f('ix_evaluation_value_results_evaluation_id'), 'evaluation_value_results', ['evaluation_id'], unique=False)
    op.create_index(op.f('ix_evaluation_value_results_value_id'), 'evaluation_value_results', ['value_id'], unique=False)

    # Self-assessments
    op.create_table(
        'employee_self_assessments',
        sa.Column('self_assessment_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('period_id', sa.Integer(), nullable=False),
        sa.Column('assessor_user_id', sa.Integer(), nullable=True),
        sa.Column('dimension', sa.Text(), nullable=False),
        sa.Column('responses', sa.Text(), nullable=False),
        sa.Column('overall_score', sa.Numeric(precision=4, scale=2), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id']),
        sa.PrimaryKeyConstraint('self_assessment_id')
    )
    op.create_index(op.f('ix_employee_self_assessments_self_assessment_id'), 'employee_self_assessments', ['self_assessment_id'], unique=False)
    op.create_index(op.f('ix_employee_self_assessments_employee_id'), 'employee_self_assessments', ['employee_id'], unique=False)
    op.create_index(op.f('ix_employee_self_assessments_period_id'), 'employee_self_assessments', ['period_id'], unique=False)
    op.create_index(op.f('ix_employee_self_assessments_status'), 'employee_self_assessments', ['status'], unique=False)

    # Notifications
    op.create_table(
        'notification_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_key', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title_template', sa.String(length=255), nullable=False),
        sa.Column('message_template', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notification_templates_id'), 'notification_templates', ['id'], unique=False)
    op.create_index(op.f('ix_notification_templates_template_key'), 'notification_templates', ['template_key'], unique=True)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='medium'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_id'), 'notifications', ['id'], unique=False)
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)

    # Seed the submission notice sent to managers
    notification_templates = sa.table(
        'notification_templates',
        sa.column('template_key', sa.String),
        sa.column('type', sa.String),
        sa.column('title_template', sa.String),
        sa.column('message_template', sa.Text),
        sa.column('is_active', sa.Boolean),
    )
    op.bulk_insert(notification_templates, [
        {
            'template_key': 'self_assessment_submitted',
            'type': 'self_assessment',
            'title_template': 'Self-assessment submitted',
            'message_template': '{employee_name} submitted a self-assessment for period {period_id}.',
            'is_active': True,
        }
    ])

    # Audit trail
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('table_name', sa.String(length=100), nullable=True),
        sa.Column('record_id', sa.Integer(), nullable=True),
        sa.Column('old_values', sa.Text(), nullable=True),
        sa.Column('new_values', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_audit_log_id'), 'audit_log', ['id'], unique=False)
    op.create_index(op.f('ix_audit_log_user_id'), 'audit_log', ['user_id'], unique=False)
    op.create_index(op.f('ix_audit_log_action'), 'audit_log', ['action'], unique=False)


def downgrade():
    op.drop_table('audit_log')
    op.drop_table('notifications')
    op.drop_table('notification_templates')
    op.drop_table('employee_self_assessments')
    op.drop_table('evaluation_value_results')
    op.drop_table('evaluation_kpi_results')
    op.drop_table('evaluations')
    op.drop_table('job_template_values')
    op.drop_table('job_template_kpis')
    op.drop_table('job_position_templates')
    op.drop_table('company_values')
    op.drop_table('company_kpis')
    op.drop_table('employees')
