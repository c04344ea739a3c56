"""qrpayload: text, TOTP and encrypted payloads for scannable codes."""

__version__ = "0.1.0"
