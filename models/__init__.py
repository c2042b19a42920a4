# models/__init__.py
"""
Models initialization file
Imports all models for easy access throughout the application and exposes
TABLE_MODELS, the table-name -> model lookup used by the SQLAlchemy store.
"""
from .base import db, RecordMixin, new_id

from .ledger import (
    Entity,
    Contact,
    Email,
    Phone,
    Website,
    BankAccount,
    InvestmentAccount,
    SecurityHeld,
    CryptoAccount,
    CreditCard,
    HostingAccount,
)

from .relationships import EntityRelatedData, EntityRelationship
from .app_log import AppLog


TABLE_MODELS = {
    model.__tablename__: model
    for model in (
        Entity,
        Contact,
        Email,
        Phone,
        Website,
        BankAccount,
        InvestmentAccount,
        SecurityHeld,
        CryptoAccount,
        CreditCard,
        HostingAccount,
        EntityRelatedData,
        EntityRelationship,
        AppLog,
    )
}

__all__ = [
    'db', 'RecordMixin', 'new_id', 'TABLE_MODELS',
    'Entity', 'Contact', 'Email', 'Phone', 'Website',
    'BankAccount', 'InvestmentAccount', 'SecurityHeld',
    'CryptoAccount', 'CreditCard', 'HostingAccount',
    'EntityRelatedData', 'EntityRelationship', 'AppLog',
]
