from sqlalchemy import Column, DateTime, JSON, String
from sqlalchemy.sql import func
from linkstats_app.database.connection import Base


class EntityRecord(Base):
    """
    Generic partitioned row used by the SQL entity store.

    Both logical tables (short link mappings and click events) live here,
    told apart by table_name. The composite primary key is what makes
    creation create-if-absent: a second insert of the same key raises
    IntegrityError instead of overwriting.
    """
    __tablename__ = "entities"

    table_name = Column(String(64), primary_key=True)
    partition_key = Column(String(255), primary_key=True)
    row_key = Column(String(255), primary_key=True)
    fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
