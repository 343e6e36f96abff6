"""Pydantic models for the subset of the Telegram Bot API the bot consumes."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.types import Attachment, FileEvent, FileKind, Requester


class TelegramModel(BaseModel):
    """Base model ignoring the many API fields the bot does not use."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(TelegramModel):
    id: int
    is_bot: bool = False
    username: Optional[str] = None

    def to_requester(self) -> Requester:
        return Requester(user_id=str(self.id), username=self.username)


class Chat(TelegramModel):
    id: int
    type: Optional[str] = None


class FileObject(TelegramModel):
    """Fields shared by Document, Video and Audio."""
    file_id: str
    file_unique_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None


class PhotoSize(TelegramModel):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int = 0
    height: int = 0
    file_size: Optional[int] = None


class Message(TelegramModel):
    message_id: int
    date: int = 0
    chat: Chat
    from_user: Optional[User] = Field(default=None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None
    media_group_id: Optional[str] = None
    document: Optional[FileObject] = None
    photo: List[PhotoSize] = Field(default_factory=list)
    video: Optional[FileObject] = None
    audio: Optional[FileObject] = None

    def attachment(self) -> Optional[Attachment]:
        """
        The file carried by the message, if any.

        Photos arrive as several sizes; the largest one is kept.
        """
        if self.document is not None:
            return Attachment(FileKind.DOCUMENT, self.document.file_id)
        if self.photo:
            largest = max(self.photo, key=lambda size: (size.width * size.height, size.file_size or 0))
            return Attachment(FileKind.PHOTO, largest.file_id)
        if self.video is not None:
            return Attachment(FileKind.VIDEO, self.video.file_id)
        if self.audio is not None:
            return Attachment(FileKind.AUDIO, self.audio.file_id)
        return None

    def has_file(self) -> bool:
        return self.attachment() is not None

    def to_file_event(self, received_at: Optional[str] = None) -> FileEvent:
        sender = self.from_user.to_requester() if self.from_user else Requester(user_id=str(self.chat.id))
        kwargs = {"received_at": received_at} if received_at else {}
        return FileEvent(
            attachment=self.attachment(),
            sender=sender,
            chat_id=self.chat.id,
            message_id=self.message_id,
            group_key=self.media_group_id,
            **kwargs,
        )


class Update(TelegramModel):
    update_id: int
    message: Optional[Message] = None


class BotUser(User):
    """Result of getMe."""
    first_name: Optional[str] = None


class TelegramFile(TelegramModel):
    """Result of getFile."""
    file_id: str
    file_unique_id: Optional[str] = None
    file_size: Optional[int] = None
    file_path: Optional[str] = None
