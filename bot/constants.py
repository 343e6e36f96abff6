"""Bot reply texts."""

WELCOME_TEXT = (
    "Welcome to File Sharing Bot!\n\n"
    "Send any document, photo, video or audio to upload it.\n"
    "Use /help to see every command."
)

HELP_TEXT = """Commands:
  (send a file)         Upload it and get a shareable ID
  /start <file_id>      Show a file by its ID
  /delete <id> [id...]  Delete your files
  /revoke <id> [id...]  Replace the IDs of your files with new ones
  /list                 List your uploaded files
  /listall              List every file (owner only)"""

NOT_AVAILABLE = "N/A"

MSG_FILE_NOT_FOUND = "❌ File ID {file_id} not found."
MSG_DELETED = "✅ File {file_id} deleted successfully."
MSG_DELETE_DENIED = "❌ You do not have permission to delete file {file_id}."
MSG_REVOKE_DENIED = "❌ You do not have permission to revoke file ID {file_id}."
MSG_REVOKE_FAILED = "❌ Could not assign a new ID to file {file_id}, please try again later."
MSG_LIST_ALL_DENIED = "❌ You do not have permission to view all files."
MSG_NO_FILES = "📂 You have no uploaded files."
MSG_NO_FILES_AT_ALL = "📂 No files uploaded."
MSG_UPLOAD_REJECTED = "❌ No supported file found in this message."
MSG_UPLOAD_FAILED = "❌ Upload failed, please try again later."
MSG_BATCH_PARTIAL = "⚠️ Only {registered} of {total} files were uploaded, please resend the rest."
