"""
SQLAlchemy ORM Models
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Table, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Append-only log: no database-level key, every cycle's rows are inserted as-is
terminal_records_table = Table(
    'terminalrecords',
    Base.metadata,
    Column('terminal', Text, nullable=False),
    Column('wait_len', Integer, nullable=False),
    Column('timestamp', DateTime(timezone=True), nullable=False),
    CheckConstraint('wait_len >= 0', name='ck_terminalrecords_wait_len_non_negative'),
)


class TerminalRecord(Base):
    __table__ = terminal_records_table

    # Mapper-only identity; nothing enforces it in the table
    __mapper_args__ = {
        'primary_key': [terminal_records_table.c.terminal, terminal_records_table.c.timestamp],
    }

    def __repr__(self):
        return f"<TerminalRecord {self.terminal} {self.wait_len}min @ {self.timestamp}>"
