"""Registry service for business logic."""

from typing import Awaitable, Callable, List, Optional, Sequence, Union

from common.logging_config import get_logger
from common.types import Attachment, FileEvent, FileKind, FileRecord, Requester
from registry.config import MAX_ID_ATTEMPTS
from registry.exceptions import (
    BatchRegistrationError,
    FileIdNotFoundError,
    IdentifierCollisionError,
    MalformedEventError,
    PermissionDeniedError,
    RegistryError,
)
from registry.repositories.registry_store import RegistryStore
from registry.schemas import FileDescriptor, OperationResult, Outcome
from registry.utils import build_public_link, generate_file_id, get_current_timestamp

logger = get_logger(__name__)

DirectUrlResolver = Callable[[str], Awaitable[Optional[str]]]


class RegistryService:
    """
    Registers files, and serves lookups, deletions and identifier rotation.

    Every mutation is written through to the snapshot before returning.
    """

    def __init__(
        self,
        store: RegistryStore,
        owner_id: str,
        bot_username: str,
        resolve_direct_url: Optional[DirectUrlResolver] = None,
        id_generator: Callable[[FileKind], str] = generate_file_id,
        max_id_attempts: int = MAX_ID_ATTEMPTS,
    ):
        """
        Args:
            store: Loaded registry store
            owner_id: Identity (numeric id or username) allowed to manage every file
            bot_username: Bot username used to build public deep links
            resolve_direct_url: Best-effort file_ref -> download URL lookup
            id_generator: Identifier factory, called with the file kind
            max_id_attempts: Re-rolls allowed when a generated identifier is taken
        """
        self.store = store
        self.owner_id = str(owner_id)
        self.bot_username = bot_username
        self.resolve_direct_url = resolve_direct_url
        self.id_generator = id_generator
        self.max_id_attempts = max_id_attempts

    def is_owner(self, requester: Requester) -> bool:
        return self.owner_id in (requester.user_id, requester.handle)

    def can_modify(self, record: FileRecord, requester: Requester) -> bool:
        return requester.handle == record.uploader or self.is_owner(requester)

    async def register_single(
        self,
        event: FileEvent,
        uploader: str,
        uploaded_at: Optional[str] = None,
    ) -> FileDescriptor:
        """
        Register one file event.

        Raises:
            MalformedEventError: If the event carries no file payload
        """
        attachment = self._extract_attachment(event)
        file_id = self._register(attachment, uploader, uploaded_at or get_current_timestamp())
        return await self._describe(file_id, self.store.get(file_id))

    async def register_batch(
        self,
        events: Sequence[FileEvent],
        uploader: str,
        uploaded_at: Optional[str] = None,
    ) -> List[FileDescriptor]:
        """
        Register a media group, one file at a time.

        The snapshot is written after each file, so files registered before a
        failure stay registered. Events without a payload are skipped.

        Returns:
            Descriptors in input order

        Raises:
            BatchRegistrationError: If a file cannot be registered; carries the
                descriptors of the files registered before it
        """
        uploaded_at = uploaded_at or get_current_timestamp()
        registered = []

        for event in events:
            try:
                attachment = self._extract_attachment(event)
            except MalformedEventError as e:
                logger.warning(f"Skipping event in batch: {e}")
                continue
            try:
                registered.append(self._register(attachment, uploader, uploaded_at))
            except RegistryError as e:
                logger.error(f"Batch for {uploader} stopped after {len(registered)}/{len(events)} file(s): {e}")
                raise BatchRegistrationError(
                    f"Batch stopped after {len(registered)} of {len(events)} file(s): {e}",
                    registered=[await self._describe(file_id, self.store.get(file_id)) for file_id in registered],
                    total=len(events),
                ) from e

        logger.info(f"Batch registered {len(registered)}/{len(events)} file(s) for {uploader}")
        return [await self._describe(file_id, self.store.get(file_id)) for file_id in registered]

    async def get_file(self, file_id: str) -> Optional[FileDescriptor]:
        """Look up a file for retrieval, including its direct link when available."""
        record = self.store.get(file_id)
        if record is None:
            return None
        return await self._describe(file_id, record)

    def delete_by_id(self, file_id: str, requester: Requester) -> Outcome:
        try:
            self._authorize(file_id, requester)
        except FileIdNotFoundError:
            return Outcome.NOT_FOUND
        except PermissionDeniedError as e:
            logger.warning(str(e))
            return Outcome.PERMISSION_DENIED

        self.store.delete(file_id)
        self.store.persist()
        logger.info(f"File {file_id} deleted by user {requester.user_id}")
        return Outcome.DELETED

    def delete_many(self, file_ids: Sequence[str], requester: Requester) -> List[OperationResult]:
        """Delete each identifier independently; one failure never stops the rest."""
        return [
            OperationResult(file_id=file_id, outcome=self.delete_by_id(file_id, requester))
            for file_id in file_ids
        ]

    async def revoke_id(self, old_id: str, requester: Requester) -> OperationResult:
        """
        Move a record to a freshly generated identifier.

        The old identifier is dropped for good; it is not kept as an alias.
        """
        try:
            record = self._authorize(old_id, requester)
        except FileIdNotFoundError:
            return OperationResult(file_id=old_id, outcome=Outcome.NOT_FOUND)
        except PermissionDeniedError as e:
            logger.warning(str(e))
            return OperationResult(file_id=old_id, outcome=Outcome.PERMISSION_DENIED)

        try:
            new_id = self._allocate_id(record)
        except RegistryError as e:
            logger.error(f"Revoke of {old_id} failed: {e}")
            return OperationResult(file_id=old_id, outcome=Outcome.FAILED)

        self.store.delete(old_id)
        self.store.set(new_id, record)
        self.store.persist()
        logger.info(f"File ID {old_id} revoked to {new_id} by user {requester.user_id}")

        return OperationResult(
            file_id=old_id,
            outcome=Outcome.REVOKED,
            new_id=new_id,
            descriptor=await self._describe(new_id, record),
        )

    async def revoke_many(self, file_ids: Sequence[str], requester: Requester) -> List[OperationResult]:
        """Revoke each identifier independently; one failure never stops the rest."""
        return [await self.revoke_id(file_id, requester) for file_id in file_ids]

    def list_for(self, requester: Requester) -> List[FileDescriptor]:
        """Files uploaded by the requester, in store order."""
        handle = requester.handle
        return [
            self._describe_offline(file_id, record)
            for file_id, record in self.store.list(lambda _, record: record.uploader == handle)
        ]

    def list_all(self, requester: Requester) -> List[FileDescriptor]:
        """
        Every registered file.

        Raises:
            PermissionDeniedError: If the requester is not the owner
        """
        if not self.is_owner(requester):
            raise PermissionDeniedError(f"User {requester.user_id} may not list all files")
        return [self._describe_offline(file_id, record) for file_id, record in self.store.list()]

    def _extract_attachment(self, event: FileEvent) -> Attachment:
        if event.attachment is None or not event.attachment.file_ref:
            raise MalformedEventError(
                f"Message {event.message_id} from {event.sender.handle} carries no file"
            )
        return event.attachment

    def _allocate_id(self, source: Union[Attachment, FileRecord]) -> str:
        kind = source.kind
        for attempt in range(self.max_id_attempts):
            file_id = self.id_generator(kind)
            if file_id not in self.store:
                return file_id
            logger.warning(f"Identifier collision on {file_id} (attempt {attempt + 1}/{self.max_id_attempts})")
        raise IdentifierCollisionError(
            f"Could not allocate a free {kind.value} identifier after {self.max_id_attempts} attempts"
        )

    def _register(self, attachment: Attachment, uploader: str, uploaded_at: str) -> str:
        file_id = self._allocate_id(attachment)
        record = FileRecord(
            file_ref=attachment.file_ref,
            kind=attachment.kind,
            uploader=uploader,
            uploaded_at=uploaded_at,
        )
        self.store.set(file_id, record)
        self.store.persist()
        logger.info(f"Registered {file_id} for {uploader}")
        return file_id

    def _authorize(self, file_id: str, requester: Requester) -> FileRecord:
        record = self.store.get(file_id)
        if record is None:
            raise FileIdNotFoundError(f"File {file_id} not found")
        if not self.can_modify(record, requester):
            raise PermissionDeniedError(
                f"User {requester.user_id} may not modify file {file_id} owned by {record.uploader}"
            )
        return record

    async def _fetch_direct_link(self, file_ref: str) -> Optional[str]:
        if self.resolve_direct_url is None:
            return None
        try:
            return await self.resolve_direct_url(file_ref)
        except Exception as e:
            logger.warning(f"Failed to resolve direct URL: {e}")
            return None

    async def _describe(self, file_id: str, record: FileRecord) -> FileDescriptor:
        return FileDescriptor.from_record(
            file_id,
            record,
            public_link=build_public_link(self.bot_username, file_id),
            direct_link=await self._fetch_direct_link(record.file_ref),
        )

    def _describe_offline(self, file_id: str, record: FileRecord) -> FileDescriptor:
        return FileDescriptor.from_record(
            file_id, record, public_link=build_public_link(self.bot_username, file_id)
        )
