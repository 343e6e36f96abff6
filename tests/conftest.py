"""Shared pytest fixtures for all tests."""

import pytest

from common.types import Attachment, FileEvent, FileKind, Requester
from registry.repositories.registry_store import JsonSnapshotFile, RegistryStore
from registry.services.registry_service import RegistryService

OWNER_ID = "999"
BOT_USERNAME = "FileBot"


@pytest.fixture
def snapshot_path(tmp_path):
    """
    Path of a registry snapshot inside the test's temp directory.

    Args:
        tmp_path: pytest tmp_path fixture
    """
    return tmp_path / 'file_database.json'


@pytest.fixture
def store(snapshot_path):
    """
    Empty, loaded registry store backed by a temp snapshot.
    """
    store = RegistryStore(JsonSnapshotFile(str(snapshot_path)))
    store.load()
    return store


@pytest.fixture
def alice():
    return Requester(user_id='101', username='alice')


@pytest.fixture
def bob():
    return Requester(user_id='202', username='bob')


@pytest.fixture
def owner():
    return Requester(user_id=OWNER_ID, username='admin')


@pytest.fixture
def resolved_urls():
    """
    File refs passed to the direct URL resolver, in call order.
    """
    return []


@pytest.fixture
def service(store, resolved_urls):
    """
    Registry service with a resolver returning a predictable direct URL.
    """
    async def resolve(file_ref):
        resolved_urls.append(file_ref)
        return f"https://files.example/{file_ref}"

    return RegistryService(
        store,
        owner_id=OWNER_ID,
        bot_username=BOT_USERNAME,
        resolve_direct_url=resolve,
    )


@pytest.fixture
def make_event(alice):
    """
    Factory for file events.

    Returns:
        Callable building a FileEvent from a file ref, kind and optional group key
    """
    def _make(file_ref='tg-file-1', kind=FileKind.DOCUMENT, group_key=None, sender=None, message_id=1):
        return FileEvent(
            attachment=Attachment(kind, file_ref) if file_ref else None,
            sender=sender or alice,
            chat_id=5000,
            message_id=message_id,
            group_key=group_key,
            received_at='2026-01-07T10:30:45+00:00',
        )

    return _make
