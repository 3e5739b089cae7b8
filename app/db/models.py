from sqlalchemy import Column, String, Integer, DateTime, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class UrlRow(Base):
    __tablename__ = "urls"

    # Surrogate key keeps insertion order and lets a rename touch only `code`
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Unique index is what rejects duplicate inserts and renames
    code = Column(String(255), unique=True, index=True, nullable=False)
    url = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    last_accessed = Column(DateTime(timezone=True), nullable=True)
    clicks = Column(Integer, nullable=False, default=0)
