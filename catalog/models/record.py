# catalog/models/record.py
from __future__ import annotations

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class RecordRow(Base):
    """
    Un rând per înregistrare dintr-o colecție (câte un fișier SQLite per colecție).

    Note:
    - `seq` păstrează ordinea de inserare (ordinea iterării).
    - `record_id` este identitatea înregistrării, unică în colecție.
    - `payload` conține înregistrarea serializată JSON (pydantic).
    """
    __tablename__ = "records"
    __table_args__ = (
        Index("ix_records_record_id", "record_id", unique=True),
    )

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<RecordRow seq={self.seq!r} record_id={self.record_id!r}>"
