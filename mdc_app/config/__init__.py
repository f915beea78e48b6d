"""
Client configuration module.

Frozen dataclass defaults, YAML overrides and validation for the transport,
protocol, resend, integrity and export settings.
"""
