"""Discord bot for configuring automatic report-mail schedules."""

__version__ = "0.1.0"
