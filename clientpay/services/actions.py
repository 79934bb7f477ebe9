# clientpay/services/actions.py
"""
User intents against the store. Each mutation issues its store call(s) and
leaves reloading to the caller; nothing here keeps records between calls.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from clientpay.errors import ValidationError
from clientpay.models.clients import Client, ClientDraft
from clientpay.models.lessons import Lesson, LessonStatus
from clientpay.repositories import clients_repo, lessons_repo
from clientpay.repositories.record_store import RecordStore
from clientpay.services.ledger import find_lesson
from clientpay.utils.amount_parser import parse_amount_expr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    clients: list = field(default_factory=list)     # list[Client]
    lessons: list = field(default_factory=list)     # list[Lesson]


def validate_draft(draft: ClientDraft) -> list[str]:
    problems = []
    if not draft.name.strip():
        problems.append("Client name is required.")
    if not draft.phone.strip():
        problems.append("Phone is required.")
    if not draft.payment_amount.strip():
        problems.append("Payment amount is required.")
    else:
        try:
            parse_amount_expr(draft.payment_amount)
        except ValueError as e:
            problems.append(f"Payment amount: {e}")
    return problems


class TrackerService:
    def __init__(self, store: RecordStore):
        self.store = store

    def reload(self) -> Snapshot:
        clients = clients_repo.load_clients(self.store)
        lessons = lessons_repo.load_lessons(self.store)
        logger.info("Reloaded %d clients, %d lessons", len(clients), len(lessons))
        return Snapshot(clients=clients, lessons=lessons)

    def save_client(self, draft: ClientDraft, editing_id: Optional[str] = None) -> Client:
        problems = validate_draft(draft)
        if problems:
            raise ValidationError(problems=tuple(problems))
        if editing_id:
            return clients_repo.update_client(self.store, editing_id, draft)
        return clients_repo.add_client(self.store, draft)

    def delete_client(self, client_id: str) -> None:
        clients_repo.delete_client(self.store, client_id)

    def delete_lesson(self, lesson_id: str) -> None:
        lessons_repo.delete_lesson(self.store, lesson_id)

    def mark_taught(self, client: Client, on: date) -> Lesson:
        """
        Record the (client, date) occurrence as taught. If a lesson for that
        pair already exists it is returned unchanged, so repeating the action
        never creates a second entry.
        """
        existing = find_lesson(client.id, on, lessons_repo.load_lessons(self.store))
        if existing is not None:
            logger.warning("Client %s already %s on %s; not adding another lesson", client.id, existing.status.value, on)
            return existing
        lesson = lessons_repo.add_lesson(self.store, client, on, LessonStatus.TAUGHT)
        logger.info("Marked %s taught on %s", client.id, on)
        return lesson

    def mark_paid(self, lesson_id: str) -> Lesson:
        current = next((x for x in lessons_repo.load_lessons(self.store) if x.id == lesson_id), None)
        if current is not None and current.status is LessonStatus.PAID:
            logger.warning("Lesson %s already paid", lesson_id)
            return current
        # A missing id falls through to update(), which raises RecordNotFoundError
        lesson = lessons_repo.set_lesson_status(self.store, lesson_id, LessonStatus.PAID)
        logger.info("Marked lesson %s paid", lesson_id)
        return lesson
