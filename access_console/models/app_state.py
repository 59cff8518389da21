# access_console/models/app_state.py
"""
Application state table — the console's replacement for browser storage.
One row per key; values are JSON documents (session token, role, ...).
Loaded into AppStateStore at startup and written back on every change.
"""

from sqlalchemy import Column, String, DateTime, Text
from access_console.database import Base


class AppStateEntry(Base):
    __tablename__ = "app_state"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)      # JSON-encoded
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<AppStateEntry {self.key} updated={self.updated_at}>"
