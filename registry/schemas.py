"""Pydantic schemas for registry results handed to the bot layer."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from common.types import FileKind, FileRecord


class Outcome(str, Enum):
    """Result of a mutation on a single identifier."""
    DELETED = "deleted"
    REVOKED = "revoked"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    FAILED = "failed"


class FileDescriptor(BaseModel):
    """Everything the bot needs to describe one registered file."""
    id: str
    kind: FileKind
    uploader: str
    uploaded_at: str
    file_ref: str
    public_link: str
    direct_link: Optional[str] = None

    @classmethod
    def from_record(
        cls,
        file_id: str,
        record: FileRecord,
        public_link: str,
        direct_link: Optional[str] = None,
    ) -> "FileDescriptor":
        return cls(
            id=file_id,
            kind=record.kind,
            uploader=record.uploader,
            uploaded_at=record.uploaded_at,
            file_ref=record.file_ref,
            public_link=public_link,
            direct_link=direct_link,
        )


class OperationResult(BaseModel):
    """Per-identifier result of a delete or revoke request."""
    file_id: str
    outcome: Outcome
    new_id: Optional[str] = None
    descriptor: Optional[FileDescriptor] = None
