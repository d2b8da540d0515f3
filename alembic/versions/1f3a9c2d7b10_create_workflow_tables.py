"""create workflow tables

Revision ID: 1f3a9c2d7b10
Revises:
Create Date: 2026-10-19 10:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1f3a9c2d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _person_columns() -> list:
    return [
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('surname', sa.String(), nullable=False),
        sa.Column('patronymic', sa.String(), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('registration_address', sa.String(), nullable=True),
        sa.Column('actual_address', sa.String(), nullable=True),
        sa.Column('postal_address', sa.String(), nullable=True),
        sa.Column('citizenship_country_code', sa.String(length=3), nullable=True),
        sa.Column('migration_card_number', sa.String(), nullable=True),
        sa.Column('residence_permit_number', sa.String(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    ]


def _document_link(table: str, owner_column: str, owner_table: str, owner_type) -> None:
    op.create_table(table,
    sa.Column(owner_column, owner_type, nullable=False),
    sa.Column('document_id', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint([owner_column], [f'{owner_table}.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint(owner_column, 'document_id')
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('providers',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('code', sa.String(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('code')
    )
    op.create_table('products',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('provider_id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('min_sum', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('max_sum', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.ForeignKeyConstraint(['provider_id'], ['providers.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('requisites',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('bic', sa.String(length=9), nullable=False),
    sa.Column('bank_name', sa.String(), nullable=False),
    sa.Column('account', sa.String(), nullable=False),
    sa.Column('corr_account', sa.String(), nullable=True),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('bic')
    )
    op.create_table('clients',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('external_client_id', sa.BigInteger(), nullable=False),
    sa.Column('person_type', sa.String(), nullable=False),
    *_person_columns(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_clients_external_client_id'), 'clients', ['external_client_id'], unique=False)
    op.create_table('insured_persons',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    *_person_columns(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('passports',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('series', sa.String(), nullable=False),
    sa.Column('number', sa.String(), nullable=False),
    sa.Column('issued_by', sa.String(), nullable=False),
    sa.Column('issue_date', sa.Date(), nullable=False),
    sa.Column('department_code', sa.String(), nullable=True),
    sa.Column('client_id', sa.Integer(), nullable=True),
    sa.Column('insured_person_id', sa.Integer(), nullable=True),
    sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['insured_person_id'], ['insured_persons.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('documents',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('storage_key', sa.String(), nullable=False),
    sa.Column('content_type', sa.String(), nullable=False),
    sa.Column('doc_type', sa.String(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('storage_key')
    )
    op.create_table('identifications',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('client_id', sa.Integer(), nullable=False),
    sa.Column('external_client_id', sa.BigInteger(), nullable=False),
    sa.Column('provider_id', sa.Integer(), nullable=False),
    sa.Column('status', sa.String(), nullable=False, comment='new | in_progress | identified | not_identified | error'),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
    sa.ForeignKeyConstraint(['provider_id'], ['providers.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_identifications_external_client_id'), 'identifications', ['external_client_id'], unique=False)
    op.create_table('identification_references',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('identification_id', sa.Integer(), nullable=False),
    sa.Column('external_reference_id', sa.BigInteger(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.ForeignKeyConstraint(['identification_id'], ['identifications.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('external_reference_id')
    )
    op.create_table('outbox_events',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('reference_id', sa.BigInteger(), nullable=False),
    sa.Column('event_kind', sa.String(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.Column('processed_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('insurances',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('contract_number', sa.String(), nullable=False),
    sa.Column('status', sa.String(), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('duration_years', sa.Integer(), nullable=False),
    sa.Column('client_id', sa.BigInteger(), nullable=False),
    sa.Column('identification_id', sa.Integer(), nullable=False),
    sa.Column('product_id', sa.Integer(), nullable=False),
    sa.Column('provider_id', sa.Integer(), nullable=False),
    sa.Column('requisites_id', sa.Integer(), nullable=False),
    sa.Column('insured_person_id', sa.Integer(), nullable=True),
    sa.Column('insurance_sum', sa.Numeric(precision=18, scale=2), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.ForeignKeyConstraint(['identification_id'], ['identifications.id']),
    sa.ForeignKeyConstraint(['insured_person_id'], ['insured_persons.id']),
    sa.ForeignKeyConstraint(['product_id'], ['products.id']),
    sa.ForeignKeyConstraint(['provider_id'], ['providers.id']),
    sa.ForeignKeyConstraint(['requisites_id'], ['requisites.id']),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('contract_number')
    )
    op.create_index(op.f('ix_insurances_client_id'), 'insurances', ['client_id'], unique=False)
    op.create_table('beneficiaries',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('insurance_id', sa.Uuid(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('surname', sa.String(), nullable=False),
    sa.Column('patronymic', sa.String(), nullable=True),
    sa.Column('birth_date', sa.Date(), nullable=False),
    sa.Column('share', sa.Float(), nullable=False),
    sa.Column('relation', sa.String(), nullable=False),
    sa.ForeignKeyConstraint(['insurance_id'], ['insurances.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('application_types',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('code', sa.String(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('code')
    )
    op.create_table('applications',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('insurance_id', sa.Uuid(), nullable=False),
    sa.Column('application_type_id', sa.Integer(), nullable=False),
    sa.Column('client_id', sa.BigInteger(), nullable=False),
    sa.Column('status', sa.String(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.ForeignKeyConstraint(['application_type_id'], ['application_types.id']),
    sa.ForeignKeyConstraint(['insurance_id'], ['insurances.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_applications_client_id'), 'applications', ['client_id'], unique=False)

    _document_link('client_documents', 'client_id', 'clients', sa.Integer())
    _document_link('person_documents', 'insured_person_id', 'insured_persons', sa.Integer())
    _document_link('insurance_documents', 'insurance_id', 'insurances', sa.Uuid())
    _document_link('application_documents', 'application_id', 'applications', sa.Uuid())


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('application_documents')
    op.drop_table('insurance_documents')
    op.drop_table('person_documents')
    op.drop_table('client_documents')
    op.drop_index(op.f('ix_applications_client_id'), table_name='applications')
    op.drop_table('applications')
    op.drop_table('application_types')
    op.drop_table('beneficiaries')
    op.drop_index(op.f('ix_insurances_client_id'), table_name='insurances')
    op.drop_table('insurances')
    op.drop_table('outbox_events')
    op.drop_table('identification_references')
    op.drop_index(op.f('ix_identifications_external_client_id'), table_name='identifications')
    op.drop_table('identifications')
    op.drop_table('documents')
    op.drop_table('passports')
    op.drop_table('insured_persons')
    op.drop_index(op.f('ix_clients_external_client_id'), table_name='clients')
    op.drop_table('clients')
    op.drop_table('requisites')
    op.drop_table('products')
    op.drop_table('providers')
