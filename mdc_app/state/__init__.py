"""
Session state machine module.

Defines the session lifecycle states, the legal transitions between them and
the result records a finished session reports.
"""
