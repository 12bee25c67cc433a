"""
Response log model.

Column names match the persisted record shape (userId, sessionDate, skillId,
skillName, response, timestamp) so other backends and exports line up.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from skillcoach.core.models import ResponseRecord, ResponseValue

from .base import Base


class ResponseRow(Base):
    """One appended skill response. Rows are never updated."""

    __tablename__ = "responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column("userId", Text, nullable=False)
    session_date: Mapped[str] = mapped_column("sessionDate", Text, nullable=False)
    skill_id: Mapped[str] = mapped_column("skillId", Text, nullable=False)
    skill_name: Mapped[str] = mapped_column("skillName", Text, nullable=False)
    response: Mapped[str] = mapped_column("response", Text, nullable=False)
    timestamp: Mapped[int] = mapped_column("timestamp", BigInteger, nullable=False)

    @classmethod
    def from_record(cls, record: ResponseRecord) -> "ResponseRow":
        return cls(
            user_id=record.user_id,
            session_date=record.session_date,
            skill_id=record.skill_id,
            skill_name=record.skill_name,
            response=record.response.value,
            timestamp=record.timestamp_ms,
        )

    def to_record(self) -> ResponseRecord:
        """
        Convert back to a domain record.

        Raises:
            ValueError: If the stored response value is not recognized
        """
        return ResponseRecord(
            user_id=self.user_id,
            session_date=self.session_date,
            skill_id=self.skill_id,
            skill_name=self.skill_name,
            response=ResponseValue.parse(self.response),
            timestamp_ms=int(self.timestamp),
        )


Index("idx_responses_user_date", ResponseRow.user_id, ResponseRow.session_date)
Index("idx_responses_timestamp", ResponseRow.timestamp)
