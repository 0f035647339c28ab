"""Create initial schema

Revision ID: 3f1c2a9d7b40
Revises: 
Create Date: 2026-01-12 10:14:22.481907

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Organization UUID'),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Organization display name'),
        sa.Column('email', sa.String(length=255), nullable=True, comment='Billing/contact email'),
        sa.Column('timezone', sa.String(length=64), nullable=False, server_default='America/New_York', comment='IANA timezone used for quiet hours'),
        sa.Column('plan', sa.String(length=20), nullable=True, comment='Paid plan: starter, growth, pro'),
        sa.Column('billing_customer_id', sa.String(length=255), nullable=True, comment='Stripe customer ID'),
        sa.Column('trial_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('trial_ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('trial_used', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('admin_granted_plan', sa.String(length=20), nullable=True, comment='Plan granted by an admin'),
        sa.Column('admin_granted_plan_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_granted_plan_notes', sa.Text(), nullable=True),
        sa.Column('admin_privileges', sa.JSON(), nullable=False, server_default='{}', comment='Privilege flags, e.g. bypass_limits, unlimited_calls'),
        sa.Column('admin_privileges_notes', sa.Text(), nullable=True),
        sa.Column('billable_calls_this_month', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('billing_period_month', sa.Integer(), nullable=True),
        sa.Column('billing_period_year', sa.Integer(), nullable=True),
        sa.Column('notification_phone', sa.String(length=20), nullable=True),
        sa.Column('notification_settings', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()'), comment='Record creation timestamp'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()'), comment='Record last update timestamp'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'phone_numbers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=False, comment='Phone number (E.164 format)'),
        sa.Column('provider_phone_id', sa.String(length=255), nullable=True, comment='Vapi phone number ID'),
        sa.Column('friendly_name', sa.String(length=255), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False, server_default='both', comment='inbound, outbound or both'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_phone_numbers_organization_id'), 'phone_numbers', ['organization_id'], unique=False)
    op.create_index(op.f('ix_phone_numbers_phone_number'), 'phone_numbers', ['phone_number'], unique=False)
    op.create_index(op.f('ix_phone_numbers_provider_phone_id'), 'phone_numbers', ['provider_phone_id'], unique=False)

    op.create_table(
        'agent_configs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('inbound_agent_id', sa.String(length=255), nullable=True, comment='Vapi assistant for inbound calls'),
        sa.Column('outbound_agent_id', sa.String(length=255), nullable=True, comment='Vapi assistant for outbound calls'),
        sa.Column('inbound_enabled', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('outbound_enabled', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id')
    )
    op.create_index(op.f('ix_agent_configs_inbound_agent_id'), 'agent_configs', ['inbound_agent_id'], unique=False)
    op.create_index(op.f('ix_agent_configs_outbound_agent_id'), 'agent_configs', ['outbound_agent_id'], unique=False)

    op.create_table(
        'leads',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('state', sa.String(length=64), nullable=True),
        sa.Column('zip_code', sa.String(length=20), nullable=True),
        sa.Column('property_type', sa.String(length=20), nullable=False, server_default='unknown'),
        sa.Column('service_type', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='new'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('source', sa.String(length=20), nullable=False, server_default='inbound', comment='inbound, manual or campaign'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'phone', name='uq_leads_org_phone')
    )
    op.create_index(op.f('ix_leads_organization_id'), 'leads', ['organization_id'], unique=False)
    op.create_index(op.f('ix_leads_status'), 'leads', ['status'], unique=False)

    op.create_table(
        'appointments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('lead_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_appointments_organization_id'), 'appointments', ['organization_id'], unique=False)
    op.create_index(op.f('ix_appointments_lead_id'), 'appointments', ['lead_id'], unique=False)

    op.create_table(
        'calls',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=True, comment='Owning organization, NULL when unattributed'),
        sa.Column('lead_id', sa.String(length=36), nullable=True),
        sa.Column('provider_call_id', sa.String(length=255), nullable=False, comment='Provider call ID'),
        sa.Column('direction', sa.String(length=20), nullable=False, server_default='unknown', comment='inbound, outbound or unknown'),
        sa.Column('from_number', sa.String(length=32), nullable=True),
        sa.Column('to_number', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, comment='Normalized call status'),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('recording_url', sa.Text(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('raw_payload', sa.JSON(), nullable=True, comment='Last raw webhook payload'),
        sa.Column('billed_at', sa.DateTime(timezone=True), nullable=True, comment='When the call was counted toward the monthly usage'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()'), comment='Record creation timestamp'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()'), comment='Record last update timestamp'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('provider_call_id')
    )
    op.create_index('idx_calls_org_created', 'calls', ['organization_id', 'created_at'], unique=False)
    op.create_index(op.f('ix_calls_organization_id'), 'calls', ['organization_id'], unique=False)
    op.create_index(op.f('ix_calls_lead_id'), 'calls', ['lead_id'], unique=False)
    op.create_index(op.f('ix_calls_status'), 'calls', ['status'], unique=False)

    op.create_table(
        'campaign_contacts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('campaign_id', sa.String(length=36), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('business_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending', comment='Last call outcome'),
        sa.Column('call_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_call_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_call_outcome', sa.String(length=20), nullable=True),
        sa.Column('last_call_duration', sa.Integer(), nullable=True),
        sa.Column('last_call_summary', sa.Text(), nullable=True),
        sa.Column('converted_lead_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['converted_lead_id'], ['leads.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_campaign_contacts_organization_id'), 'campaign_contacts', ['organization_id'], unique=False)
    op.create_index(op.f('ix_campaign_contacts_campaign_id'), 'campaign_contacts', ['campaign_id'], unique=False)

    op.create_table(
        'call_disputes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('call_id', sa.String(length=36), nullable=True),
        sa.Column('campaign_contact_id', sa.String(length=36), nullable=True),
        sa.Column('call_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('call_duration', sa.Integer(), nullable=True),
        sa.Column('call_outcome', sa.String(length=50), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.String(length=255), nullable=True),
        sa.Column('credit_refunded', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['call_id'], ['calls.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['campaign_contact_id'], ['campaign_contacts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_call_disputes_organization_id'), 'call_disputes', ['organization_id'], unique=False)
    op.create_index(op.f('ix_call_disputes_status'), 'call_disputes', ['status'], unique=False)

    op.create_table(
        'workflows',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('trigger_type', sa.String(length=50), nullable=False, comment='Event that starts the workflow'),
        sa.Column('trigger_config', sa.JSON(), nullable=False, server_default='{}'),
        sa.Column('actions', sa.JSON(), nullable=False, server_default='[]', comment='Ordered list of {type, config}'),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('execution_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_executed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_workflows_organization_id'), 'workflows', ['organization_id'], unique=False)
    op.create_index(op.f('ix_workflows_trigger_type'), 'workflows', ['trigger_type'], unique=False)

    op.create_table(
        'workflow_executions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('workflow_id', sa.String(length=36), nullable=False),
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('trigger_event', sa.String(length=50), nullable=False),
        sa.Column('trigger_data', sa.JSON(), nullable=False, server_default='{}'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='running', comment='running, completed, failed'),
        sa.Column('lead_id', sa.String(length=36), nullable=True),
        sa.Column('call_id', sa.String(length=36), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['workflow_id'], ['workflows.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_workflow_executions_workflow_id'), 'workflow_executions', ['workflow_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_workflow_executions_workflow_id'), table_name='workflow_executions')
    op.drop_table('workflow_executions')
    op.drop_index(op.f('ix_workflows_trigger_type'), table_name='workflows')
    op.drop_index(op.f('ix_workflows_organization_id'), table_name='workflows')
    op.drop_table('workflows')
    op.drop_index(op.f('ix_call_disputes_status'), table_name='call_disputes')
    op.drop_index(op.f('ix_call_disputes_organization_id'), table_name='call_disputes')
    op.drop_table('call_disputes')
    op.drop_index(op.f('ix_campaign_contacts_campaign_id'), table_name='campaign_contacts')
    op.drop_index(op.f('ix_campaign_contacts_organization_id'), table_name='campaign_contacts')
    op.drop_table('campaign_contacts')
    op.drop_index(op.f('ix_calls_status'), table_name='calls')
    op.drop_index(op.f('ix_calls_lead_id'), table_name='calls')
    op.drop_index(op.f('ix_calls_organization_id'), table_name='calls')
    op.drop_index('idx_calls_org_created', table_name='calls')
    op.drop_table('calls')
    op.drop_index(op.f('ix_appointments_lead_id'), table_name='appointments')
    op.drop_index(op.f('ix_appointments_organization_id'), table_name='appointments')
    op.drop_table('appointments')
    op.drop_index(op.f('ix_leads_status'), table_name='leads')
    op.drop_index(op.f('ix_leads_organization_id'), table_name='leads')
    op.drop_table('leads')
    op.drop_index(op.f('ix_agent_configs_outbound_agent_id'), table_name='agent_configs')
    op.drop_index(op.f('ix_agent_configs_inbound_agent_id'), table_name='agent_configs')
    op.drop_table('agent_configs')
    op.drop_index(op.f('ix_phone_numbers_provider_phone_id'), table_name='phone_numbers')
    op.drop_index(op.f('ix_phone_numbers_phone_number'), table_name='phone_numbers')
    op.drop_index(op.f('ix_phone_numbers_organization_id'), table_name='phone_numbers')
    op.drop_table('phone_numbers')
    op.drop_table('organizations')
