# clientpay/repositories/lessons_repo.py
import logging
from datetime import date

from clientpay.config import LESSONS_TAB
from clientpay.models.clients import Client
from clientpay.models.lessons import Lesson, LessonStatus
from clientpay.repositories.record_store import RecordStore

logger = logging.getLogger(__name__)


def load_lessons(store: RecordStore) -> list[Lesson]:
    out = []
    for row in store.list(LESSONS_TAB):
        lesson = Lesson.from_row(row)
        if lesson is None:
            logger.warning("Skipping lesson row without id (client %r)", row.get("client_name"))
            continue
        out.append(lesson)
    return out


def add_lesson(store: RecordStore, client: Client, on: date, status: LessonStatus = LessonStatus.TAUGHT) -> Lesson:
    row = store.insert(
        LESSONS_TAB,
        {
            "client_id": client.id,
            "client_name": client.name,
            "amount": client.payment_amount,
            "date": on.isoformat(),
            "status": status.value,
        },
    )
    return Lesson.from_row(row)


def set_lesson_status(store: RecordStore, lesson_id: str, status: LessonStatus) -> Lesson:
    row = store.update(LESSONS_TAB, lesson_id, {"status": status.value})
    return Lesson.from_row(row)


def delete_lesson(store: RecordStore, lesson_id: str) -> None:
    store.delete(LESSONS_TAB, lesson_id)
