# models/relationships.py
from models.base import db, RecordMixin


class EntityRelatedData(RecordMixin, db.Model):
    """
    Association between an Entity and any detail record.
    Example type_of_record: 'contacts', 'bank_accounts', 'websites', ...

    (type_of_record, related_data_id) together act as the foreign key; no
    database constraint can point at "one of several tables", so a link may
    outlive the record it names.
    """
    __tablename__ = "entity_related_data"

    # Who (plain column: deleting an entity leaves its links in place)
    entity_id = db.Column(db.String(36), nullable=False)

    # What (polymorphic)
    related_data_id = db.Column(db.String(36), nullable=False)
    type_of_record = db.Column(db.String(40), nullable=False)   # e.g. 'contacts'

    relationship_description = db.Column(db.Text)                # freeform: "Primary Attorney"

    __table_args__ = (
        db.Index("ix_related_entity_type", "entity_id", "type_of_record"),
        db.Index("ix_related_target", "related_data_id", "type_of_record"),
    )


class EntityRelationship(RecordMixin, db.Model):
    """Direct entity-to-entity link (owner of, subsidiary of, spouse, ...)."""
    __tablename__ = "entity_relationships"

    from_entity_id = db.Column(db.String(36), nullable=False, index=True)
    to_entity_id = db.Column(db.String(36), nullable=False, index=True)
    relationship_type = db.Column(db.String(100))
    description = db.Column(db.Text)
