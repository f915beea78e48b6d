"""
Utility functions module.

Shared helpers that do not belong to a single component, such as the
resend backoff schedule.
"""
