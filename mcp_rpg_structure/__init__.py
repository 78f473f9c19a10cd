"""Generate and import RPG free-form data structure declarations (dcl-ds)."""

__version__ = "0.1.0"
