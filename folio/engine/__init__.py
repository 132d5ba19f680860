"""Folio Engine — configuration, errors, structured logging, shared context."""
