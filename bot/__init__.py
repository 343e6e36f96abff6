"""Telegram front end for the file registry."""
