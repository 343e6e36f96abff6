"""Project-wide constants (identifier format, Telegram endpoints, paging)."""

DEFAULT_FILE_KIND: str = "unknown"
FILE_ID_SUFFIX_LENGTH: int = 8  # hex chars after the kind prefix

TELEGRAM_API_BASE: str = "https://api.telegram.org"
PUBLIC_LINK_TEMPLATE: str = "https://t.me/{bot_username}?start={file_id}"

LIST_PAGE_SIZE: int = 50  # max entries per /listall message
MAX_MESSAGE_LENGTH: int = 4096  # Bot API limit on sendMessage text
