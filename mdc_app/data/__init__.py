"""
Packet ingestion module.

Handles framing of the inbound byte stream, decoding and validation of
fixed-length packets, and the sequence-indexed packet store.
"""
