"""Configuration settings for the file registry."""

import os


DATABASE_PATH = os.environ.get("FILE_REGISTRY_DB_PATH", "./file_database.json")

MEDIA_GROUP_WINDOW_SECONDS = float(os.environ.get("MEDIA_GROUP_WINDOW_SECONDS", "1.0"))

MEDIA_GROUP_MAX_FILES = int(os.environ.get("MEDIA_GROUP_MAX_FILES", "50"))

MEDIA_GROUP_MAX_WAIT_SECONDS = float(os.environ.get("MEDIA_GROUP_MAX_WAIT_SECONDS", "30"))

MAX_ID_ATTEMPTS = 5
