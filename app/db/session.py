import logging

from fastapi import Request

from app.core.config import Settings
from app.db.store import DocumentStore, FirestoreStore, MemoryStore

logger = logging.getLogger("agenda.store")


def create_store(settings: Settings) -> DocumentStore:
    if settings.LOCAL_STORE:
        logger.warning("LOCAL_STORE=1: usando store em memoria, dados nao sao persistidos.")
        return MemoryStore(batch_limit=settings.STORE_BATCH_LIMIT)
    return FirestoreStore(batch_limit=settings.STORE_BATCH_LIMIT)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store
