"""Roster attendance: members, time-slot sessions, pasted-roster ingestion and monthly statistics."""

__version__ = "0.1.0"
