"""Shared data type definitions (FileRecord, Attachment, FileEvent, Requester)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class FileKind(str, Enum):
    """Kind of payload carried by a file submission."""
    DOCUMENT = "document"
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FileKind":
        """Map a stored kind string back to the enum, falling back to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Requester:
    """
    Identity of the user issuing a command or submitting a file.

    Attributes:
        user_id: Numeric transport user id, as a string
        username: Optional public username
    """
    user_id: str
    username: Optional[str] = None

    @property
    def handle(self) -> str:
        """Username when set, numeric id otherwise. Stored as the uploader."""
        return self.username or self.user_id


@dataclass(frozen=True)
class Attachment:
    """The single file payload of an event, tagged with its kind."""
    kind: FileKind
    file_ref: str


@dataclass(frozen=True)
class FileEvent:
    """
    One inbound file submission.

    group_key is set when the file is part of a multi-file submission
    (Telegram media group) and None for a standalone upload.
    """
    attachment: Optional[Attachment]
    sender: Requester
    chat_id: Optional[int] = None
    message_id: Optional[int] = None
    group_key: Optional[str] = None
    received_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


@dataclass(frozen=True)
class FileRecord:
    """
    Metadata stored for every registered file.

    Serialized with the keys used by the snapshot file
    (file_id, fileType, uploader, uploadDate).
    """
    file_ref: str
    kind: FileKind
    uploader: str
    uploaded_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_id": self.file_ref,
            "fileType": self.kind.value,
            "uploader": self.uploader,
            "uploadDate": self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        return cls(
            file_ref=data["file_id"],
            kind=FileKind.parse(data.get("fileType")),
            uploader=str(data["uploader"]),
            uploaded_at=data["uploadDate"],
        )
