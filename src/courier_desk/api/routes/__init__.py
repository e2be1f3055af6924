"""Route group exports."""

from . import backup, courier, entries, extraction, health, reports, settings, steadfast

__all__ = ["backup", "courier", "entries", "extraction", "health", "reports", "settings", "steadfast"]
