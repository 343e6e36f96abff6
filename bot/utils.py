"""Formatting helpers turning registry descriptors into reply text."""

from typing import List, Sequence

from bot.constants import NOT_AVAILABLE
from common.constants import LIST_PAGE_SIZE, MAX_MESSAGE_LENGTH
from registry.schemas import FileDescriptor


def paginate(
    header: str,
    entries: Sequence[str],
    max_entries: int = LIST_PAGE_SIZE,
    max_length: int = MAX_MESSAGE_LENGTH,
    separator: str = "\n\n",
) -> List[str]:
    """
    Join entries into messages that each fit in one Telegram message.

    A page closes when it holds max_entries entries or when the next entry
    would push it past max_length characters. An entry too long to fit
    under the header is cut to the limit.

    Args:
        header: Text starting every page
        entries: Rendered entries, in order
        max_entries: Max entries per page
        max_length: Max characters per page, header included
        separator: Text between header and entries

    Returns:
        Rendered pages; empty when there are no entries
    """
    if max_entries <= 0:
        raise ValueError("max_entries must be positive")

    pages: List[str] = []
    current: List[str] = []
    length = len(header)

    for entry in entries:
        if len(header) + len(separator) + len(entry) > max_length:
            entry = entry[:max_length - len(header) - len(separator)]
        if current and (len(current) >= max_entries or length + len(separator) + len(entry) > max_length):
            pages.append(header + separator + separator.join(current))
            current = []
            length = len(header)
        current.append(entry)
        length += len(separator) + len(entry)

    if current:
        pages.append(header + separator + separator.join(current))
    return pages


def format_upload(descriptor: FileDescriptor) -> str:
    return (
        "✅ File uploaded!\n"
        f"• ID: {descriptor.id}\n"
        f"• Public URL: {descriptor.public_link}\n"
        f"• Direct Download URL: {descriptor.direct_link or NOT_AVAILABLE}"
    )


def format_batch(descriptors: Sequence[FileDescriptor]) -> List[str]:
    """Batch summary, split into as many messages as the length limit needs."""
    summary = [
        f"• ID: {d.id}\n  Public: {d.public_link}\n  Direct: {d.direct_link or NOT_AVAILABLE}"
        for d in descriptors
    ]
    return paginate("Batch upload completed:", summary)


def format_file_details(descriptor: FileDescriptor) -> str:
    return (
        "📥 File Downloaded:\n"
        f"• File ID: {descriptor.id}\n"
        f"• Uploader: {descriptor.uploader}\n"
        f"• Upload Date: {descriptor.uploaded_at}\n"
        f"• Type: {descriptor.kind.value}\n"
        f"• Public Link: {descriptor.public_link}\n"
        f"• Direct Download URL: {descriptor.direct_link or NOT_AVAILABLE}"
    )


def format_archive_caption(descriptor: FileDescriptor) -> str:
    """Caption attached to the copy posted in the archive channel."""
    return "\n".join([
        "📄 File Uploaded:",
        f"• Uploader: {descriptor.uploader}",
        f"• File ID: {descriptor.id}",
        f"• Upload Date: {descriptor.uploaded_at}",
        f"• Public Link: {descriptor.public_link}",
        f"• Direct Download URL: {descriptor.direct_link or NOT_AVAILABLE}",
    ])


def format_revoked(old_id: str, descriptor: FileDescriptor) -> str:
    return (
        f"✅ File ID {old_id} has been updated:\n"
        f"• New ID: {descriptor.id}\n"
        f"• Public URL: {descriptor.public_link}\n"
        f"• Direct Download URL: {descriptor.direct_link or NOT_AVAILABLE}"
    )


def format_list_entry(descriptor: FileDescriptor, with_uploader: bool = False) -> str:
    details = f"Type: {descriptor.kind.value}"
    if with_uploader:
        details += f", Uploader: {descriptor.uploader}"
    return f"• ID: {descriptor.id}\n  {details}, Uploaded: {descriptor.uploaded_at}"
