# models/ledger.py
"""
LedgerOne record tables

Entities are the anchor records. Every other table here is a "detail" record
that can exist on its own and gets attached to entities through
models.relationships.EntityRelatedData.
"""
from models.base import db, RecordMixin


class Entity(RecordMixin, db.Model):
    __tablename__ = 'entities'

    type = db.Column(db.String(50), index=True)            # Person, Business, ...
    name = db.Column(db.String(255), nullable=False, index=True)
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)

    # Legal info
    legal_business_name = db.Column(db.String(255))
    employer_identification_number = db.Column(db.String(20))
    incorporation_date = db.Column(db.Date)
    country_of_formation = db.Column(db.String(100))
    state_of_formation = db.Column(db.String(100))
    business_type = db.Column(db.String(50))               # Single-LLC, LLC, S-Corp, C-Corp
    industry = db.Column(db.String(120))
    naics_code = db.Column(db.String(20))
    legal_address = db.Column(db.String(255))
    mailing_address = db.Column(db.String(255))
    registered_agent_name = db.Column(db.String(255))
    registered_agent_address = db.Column(db.String(255))

    user_id = db.Column(db.String(36))


class Contact(RecordMixin, db.Model):
    __tablename__ = 'contacts'

    name = db.Column(db.String(255), index=True)
    title = db.Column(db.String(120))
    email = db.Column(db.String(255))
    phone = db.Column(db.String(64))
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class Email(RecordMixin, db.Model):
    __tablename__ = 'emails'

    email = db.Column(db.String(255), index=True)
    label = db.Column(db.String(120))
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class Phone(RecordMixin, db.Model):
    __tablename__ = 'phones'

    phone = db.Column(db.String(64), index=True)
    label = db.Column(db.String(120))
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class Website(RecordMixin, db.Model):
    __tablename__ = 'websites'

    url = db.Column(db.String(500), index=True)
    label = db.Column(db.String(120))
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class BankAccount(RecordMixin, db.Model):
    __tablename__ = 'bank_accounts'

    bank_name = db.Column(db.String(255), index=True)
    account_number = db.Column(db.String(64))
    routing_number = db.Column(db.String(32))
    institution_held_at = db.Column(db.String(255))
    purpose = db.Column(db.String(255))
    last_balance = db.Column(db.Float)
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class InvestmentAccount(RecordMixin, db.Model):
    __tablename__ = 'investment_accounts'

    provider = db.Column(db.String(255), index=True)
    account_type = db.Column(db.String(100))
    account_number = db.Column(db.String(64))
    institution_held_at = db.Column(db.String(255))
    purpose = db.Column(db.String(255))
    last_balance = db.Column(db.Float)
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class SecurityHeld(RecordMixin, db.Model):
    """Position inside an investment account (direct parent/child link, not polymorphic)."""
    __tablename__ = 'securities_held'

    investment_account_id = db.Column(db.String(36), db.ForeignKey('investment_accounts.id'), index=True)
    symbol = db.Column(db.String(20), index=True)
    name = db.Column(db.String(255))
    quantity = db.Column(db.Float)
    cost_basis = db.Column(db.Float)
    last_price = db.Column(db.Float)
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class CryptoAccount(RecordMixin, db.Model):
    __tablename__ = 'crypto_accounts'

    platform = db.Column(db.String(255), index=True)
    account_number = db.Column(db.String(64))
    wallet_address = db.Column(db.String(255))
    institution_held_at = db.Column(db.String(255))
    purpose = db.Column(db.String(255))
    last_balance = db.Column(db.Float)
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class CreditCard(RecordMixin, db.Model):
    __tablename__ = 'credit_cards'

    cardholder_name = db.Column(db.String(255), index=True)
    card_number = db.Column(db.String(32))
    issuer = db.Column(db.String(120))
    type = db.Column(db.String(50))
    institution_held_at = db.Column(db.String(255))
    purpose = db.Column(db.String(255))
    last_balance = db.Column(db.Float)
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))


class HostingAccount(RecordMixin, db.Model):
    __tablename__ = 'hosting_accounts'

    provider = db.Column(db.String(255), index=True)
    login_url = db.Column(db.String(500))
    username = db.Column(db.String(255))
    password = db.Column(db.String(255))
    short_description = db.Column(db.String(255))
    description = db.Column(db.Text)
    user_id = db.Column(db.String(36))
