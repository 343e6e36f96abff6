"""Types, constants and logging shared by the registry and the bot."""
