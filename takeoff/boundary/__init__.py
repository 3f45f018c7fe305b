"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, extraction
backends, spreadsheet files).
"""
