import logging

from clientpay.config import CLIENTS_TAB
from clientpay.models.clients import Client, ClientDraft
from clientpay.repositories.record_store import RecordStore

logger = logging.getLogger(__name__)


def load_clients(store: RecordStore) -> list[Client]:
    out = []
    for row in store.list(CLIENTS_TAB):
        c = Client.from_row(row)
        if c is None:
            logger.warning("Skipping client row without id: %r", row.get("name"))
            continue
        out.append(c)
    return out


def add_client(store: RecordStore, draft: ClientDraft) -> Client:
    row = store.insert(CLIENTS_TAB, draft.to_row())
    return Client.from_row(row)


def update_client(store: RecordStore, client_id: str, draft: ClientDraft) -> Client:
    row = store.update(CLIENTS_TAB, client_id, draft.to_row())
    return Client.from_row(row)


def delete_client(store: RecordStore, client_id: str) -> None:
    store.delete(CLIENTS_TAB, client_id)
