from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from clientpay.config import LESSONS_HEADERS
from clientpay.utils.amount_parser import to_amount


class LessonStatus(Enum):
    """State of one occurrence of a weekly session."""

    SCHEDULED = "scheduled"      # no lesson record for the date
    TAUGHT = "taught"            # delivered, payment outstanding
    PAID = "paid"

    @classmethod
    def from_value(cls, value) -> Optional["LessonStatus"]:
        s = str(value or "").strip().lower()
        for status in cls:
            if status.value == s:
                return status
        return None


@dataclass(frozen=True)
class Lesson:
    id: str
    client_id: str
    client_name: str
    amount_text: str
    date: str                    # YYYY-MM-DD as stored
    status: Optional[LessonStatus]
    created_at_utc: str
    updated_at_utc: str

    @property
    def amount(self) -> Decimal:
        return to_amount(self.amount_text)

    @property
    def occurred_on(self) -> Optional[date]:
        try:
            return date.fromisoformat(self.date[:10])
        except ValueError:
            return None

    @property
    def short_id(self) -> str:
        return self.id[:8]

    @staticmethod
    def from_row(row: dict) -> Optional["Lesson"]:
        values = {h: str(row.get(h, "") or "").strip() for h in LESSONS_HEADERS}
        if not values["id"]:
            return None
        return Lesson(
            id=values["id"],
            client_id=values["client_id"],
            client_name=values["client_name"],
            amount_text=values["amount"],
            date=values["date"],
            status=LessonStatus.from_value(values["status"]),
            created_at_utc=values["created_at_utc"],
            updated_at_utc=values["updated_at_utc"],
        )
