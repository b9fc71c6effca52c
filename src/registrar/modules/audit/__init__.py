"""
Audit module - Append-only trail of privileged state changes.
"""
