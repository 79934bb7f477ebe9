# clientpay/services/ledger.py
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from clientpay.config import DAYS
from clientpay.models.clients import Client
from clientpay.models.lessons import Lesson, LessonStatus
from clientpay.utils.amount_parser import ZERO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partition:
    upcoming: list = field(default_factory=list)            # list[Client]
    awaiting_payment: list = field(default_factory=list)    # list[Lesson]
    paid_history: list = field(default_factory=list)        # list[Lesson], newest first
    total_pending: Decimal = ZERO
    total_earned: Decimal = ZERO
    client_count: int = 0


def sum_amounts(lessons: Iterable[Lesson]) -> Decimal:
    # Lesson.amount is already zero for missing/unparseable values
    return sum((lesson.amount for lesson in lessons), ZERO)


def occurrence_status(client_id: str, on: date, lessons: Iterable[Lesson]) -> LessonStatus:
    """Scheduled unless a lesson exists for (client_id, on); paid wins over taught."""
    found = LessonStatus.SCHEDULED
    iso = on.isoformat()
    for lesson in lessons:
        if lesson.client_id != client_id or lesson.date[:10] != iso:
            continue
        if lesson.status is LessonStatus.PAID:
            return LessonStatus.PAID
        if lesson.status is LessonStatus.TAUGHT:
            found = LessonStatus.TAUGHT
    return found


def find_lesson(client_id: str, on: date, lessons: Iterable[Lesson]):
    iso = on.isoformat()
    for lesson in lessons:
        if lesson.client_id == client_id and lesson.date[:10] == iso and lesson.status is not None:
            return lesson
    return None


def _newest_first_key(lesson: Lesson):
    d = lesson.occurred_on
    # Unparseable dates go last; sorted() keeps input order among equal keys
    return (d is not None, d or date.min)


def partition(clients: Iterable[Client], lessons: Iterable[Lesson], today: date) -> Partition:
    clients = list(clients)
    lessons = list(lessons)

    today_name = DAYS[today.weekday()]
    today_iso = today.isoformat()

    awaiting, paid = [], []
    processed_today = set()
    for lesson in lessons:
        if lesson.status is None:
            logger.warning("Lesson %s has unknown status; excluded", lesson.id)
            continue
        if lesson.date[:10] == today_iso:
            processed_today.add(lesson.client_id)
        if lesson.status is LessonStatus.TAUGHT:
            awaiting.append(lesson)
        elif lesson.status is LessonStatus.PAID:
            paid.append(lesson)

    upcoming = [c for c in clients if c.day == today_name and c.id not in processed_today]
    paid_history = sorted(paid, key=_newest_first_key, reverse=True)

    return Partition(
        upcoming=upcoming,
        awaiting_payment=awaiting,
        paid_history=paid_history,
        total_pending=sum_amounts(awaiting),
        total_earned=sum_amounts(paid_history),
        client_count=len(clients),
    )
