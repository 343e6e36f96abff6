"""Tests for update routing in the bot dispatcher."""

import asyncio
import json
from unittest.mock import MagicMock

import httpx
import pytest

from bot.config import BotConfig
from bot.dispatcher import UpdateDispatcher
from bot.schemas import Update
from bot.telegram_client import TelegramAPIError, TelegramClient
from common.types import FileKind
from registry.exceptions import IdentifierCollisionError
from registry.services.registry_service import RegistryService

ARCHIVE_CHAT = '-100200'


def _update(update_id, *, text=None, media_group_id=None, document=None, photo=None,
            username='alice', user_id=101):
    message = {
        'message_id': update_id,
        'date': 1700000000,
        'chat': {'id': 5000, 'type': 'private'},
        'from': {'id': user_id, 'is_bot': False, 'username': username},
    }
    if text is not None:
        message['text'] = text
    if media_group_id is not None:
        message['media_group_id'] = media_group_id
    if document is not None:
        message['document'] = {'file_id': document, 'file_unique_id': f'u-{document}'}
    if photo is not None:
        message['photo'] = [
            {'file_id': f'{photo}-small', 'width': 90, 'height': 90},
            {'file_id': photo, 'width': 1280, 'height': 960},
        ]
    return Update.model_validate({'update_id': update_id, 'message': message})


@pytest.fixture
def client():
    client = MagicMock(spec=TelegramClient)
    client.get_file_url.return_value = None
    return client


@pytest.fixture
def dispatcher(service, client):
    return UpdateDispatcher(
        service,
        client,
        archive_chat_id=ARCHIVE_CHAT,
        window=0.05,
        max_group_size=None,
        max_wait=None,
    )


def _replies(client):
    return [call.args[1] for call in client.send_message.await_args_list]


@pytest.mark.asyncio
async def test_single_upload_registers_and_replies(dispatcher, client, store):
    await dispatcher.handle_update(_update(1, document='tg-doc'))

    assert len(store) == 1
    (file_id, record), = store.list()
    assert record.uploader == 'alice'
    assert record.kind == FileKind.DOCUMENT
    assert 'File uploaded!' in _replies(client)[0]
    assert file_id in _replies(client)[0]
    client.send_media.assert_awaited_once()
    assert client.send_media.await_args.args[:3] == (ARCHIVE_CHAT, FileKind.DOCUMENT, 'tg-doc')


@pytest.mark.asyncio
async def test_photo_uses_largest_size(dispatcher, store):
    await dispatcher.handle_update(_update(1, photo='tg-photo'))

    (file_id, record), = store.list()
    assert file_id.startswith('photo(')
    assert record.file_ref == 'tg-photo'


@pytest.mark.asyncio
async def test_media_group_registered_as_one_batch(dispatcher, client, store):
    await dispatcher.handle_update(_update(1, document='tg-1', media_group_id='album'))
    await dispatcher.handle_update(_update(2, document='tg-2', media_group_id='album'))

    assert len(store) == 0
    await asyncio.sleep(0.2)

    assert [record.file_ref for _, record in store.list()] == ['tg-1', 'tg-2']
    replies = _replies(client)
    assert len(replies) == 1
    assert replies[0].startswith('Batch upload completed')
    assert client.send_media.await_count == 2


@pytest.mark.asyncio
async def test_shutdown_flushes_pending_group(dispatcher, store):
    await dispatcher.handle_update(_update(1, document='tg-1', media_group_id='album'))

    await dispatcher.shutdown()

    assert len(store) == 1


@pytest.mark.asyncio
async def test_command_replies(dispatcher, client, store):
    await dispatcher.handle_update(_update(1, document='tg-doc'))
    (file_id, _), = store.list()
    client.send_message.reset_mock()

    await dispatcher.handle_update(_update(2, text=f'/delete {file_id} document(ffffffff)'))

    replies = _replies(client)
    assert len(replies) == 2
    assert 'deleted successfully' in replies[0]
    assert 'not found' in replies[1]
    assert len(store) == 0


@pytest.mark.asyncio
async def test_listall_denied_for_non_owner(dispatcher, client):
    await dispatcher.handle_update(_update(1, text='/listall', username='bob', user_id=202))

    assert _replies(client) == ['❌ You do not have permission to view all files.']


@pytest.mark.asyncio
async def test_parse_error_is_reported(dispatcher, client):
    await dispatcher.handle_update(_update(1, text='/delete'))

    assert _replies(client) == ['❌ Please provide at least one file ID to delete.']


@pytest.mark.asyncio
async def test_plain_text_is_ignored(dispatcher, client, store):
    await dispatcher.handle_update(_update(1, text='hello'))

    client.send_message.assert_not_awaited()
    assert len(store) == 0


@pytest.mark.asyncio
async def test_archive_failure_does_not_undo_upload(dispatcher, client, store):
    client.send_media.side_effect = TelegramAPIError('sendDocument', 'Forbidden: bot is not a member')

    await dispatcher.handle_update(_update(1, document='tg-doc'))

    assert len(store) == 1
    assert 'File uploaded!' in _replies(client)[0]


@pytest.mark.asyncio
async def test_run_advances_offset_and_stops(dispatcher, client, store):
    stop_event = asyncio.Event()
    batches = [[_update(7, document='tg-a'), _update(8, document='tg-b')]]

    async def get_updates(offset):
        if batches:
            return batches.pop(0)
        stop_event.set()
        return []

    client.get_updates.side_effect = get_updates

    await asyncio.wait_for(dispatcher.run(stop_event), timeout=1)

    assert dispatcher.offset == 9
    assert len(store) == 2
    assert client.get_updates.await_args_list[1].args == (9,)


@pytest.mark.asyncio
async def test_connection_reset_while_archiving_does_not_stop_batch(service, store):
    archived = []

    def handler(request):
        if request.url.path.endswith('/sendDocument'):
            body = json.loads(request.content)
            if body['document'] == 'tg-1':
                raise httpx.ReadError('reset', request=request)
            archived.append(body['document'])
        return httpx.Response(200, json={'ok': True, 'result': {}})

    config = BotConfig(
        bot_token='123:abc', channel_id=ARCHIVE_CHAT, owner_id='999',
        api_base='https://api.test', max_retries=0, retry_base_delay=0,
    )
    client = TelegramClient(config)
    client.session = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url='https://api.test/bot123:abc/'
    )
    dispatcher = UpdateDispatcher(service, client, archive_chat_id=ARCHIVE_CHAT, window=0.05)
    e1 = _update(1, document='tg-1', media_group_id='album').message.to_file_event()
    e2 = _update(2, document='tg-2', media_group_id='album').message.to_file_event()

    await dispatcher._handle_media_group('album', [e1, e2])

    assert len(store) == 2
    assert archived == ['tg-2']
    await client.aclose()


@pytest.mark.asyncio
async def test_partial_batch_reports_registered_files(store, client):
    ids = iter(['document(00000001)'])

    def generator(kind):
        try:
            return next(ids)
        except StopIteration:
            raise IdentifierCollisionError('out of ids')

    service = RegistryService(store, owner_id='999', bot_username='FileBot', id_generator=generator)
    dispatcher = UpdateDispatcher(service, client, archive_chat_id=ARCHIVE_CHAT, window=0.05)
    events = [
        _update(i, document=f'tg-{i}', media_group_id='album').message.to_file_event()
        for i in (1, 2, 3)
    ]

    await dispatcher._handle_media_group('album', events)

    replies = _replies(client)
    assert replies[0].startswith('Batch upload completed')
    assert 'document(00000001)' in replies[0]
    assert replies[1] == '⚠️ Only 1 of 3 files were uploaded, please resend the rest.'
    assert client.send_media.await_count == 1
    assert list(store.list())[0][0] == 'document(00000001)'
