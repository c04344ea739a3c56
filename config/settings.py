"""Project configuration settings.

Algorithm parameters are fixed; only the operator-facing knobs at the
bottom are read from the environment.
"""

from pathlib import Path
import os

# Envelope / crypto (fixed, not caller-configurable)
DEFAULT_ITERATIONS = 100_000  # PBKDF2-HMAC-SHA256
SALT_LENGTH = 16
NONCE_LENGTH = 12  # 96-bit GCM nonce
KEY_LENGTH = 32  # AES-256
AUTH_TAG_LENGTH = 16  # GCM tag length
MIN_ENVELOPE_LENGTH = SALT_LENGTH + NONCE_LENGTH + AUTH_TAG_LENGTH
PASSWORD_MIN_LENGTH = 8

# Input limits
STATIC_MAX_LENGTH = 500
TOTP_SECRET_MIN_LENGTH = 4

# TOTP defaults handed to the code generator
TOTP_PERIOD = 30
TOTP_DIGITS = 6
TOTP_ALGORITHM = "SHA1"
TOTP_ISSUER = "QR Generator"
TOTP_LABEL = "User"

# QR rendering defaults
QR_ERROR_CORRECTION = "M"
QR_BORDER = 2
QR_BOX_SIZE = 10
QR_FILL_COLOR = "#000000"
QR_BACK_COLOR = "#FFFFFF"

# Files an envelope may be read from
PAYLOAD_FILE_EXTENSIONS = (".txt", ".json", ".qr")

# Environment
LOG_LEVEL = os.environ.get("QRPAYLOAD_LOG_LEVEL", "WARNING").upper()
DEFAULT_OUTPUT_DIR = Path(os.environ.get("QRPAYLOAD_OUTPUT_DIR", "qr_output"))

__all__ = [
	'DEFAULT_ITERATIONS', 'SALT_LENGTH', 'NONCE_LENGTH', 'KEY_LENGTH', 'AUTH_TAG_LENGTH',
	'MIN_ENVELOPE_LENGTH', 'PASSWORD_MIN_LENGTH', 'STATIC_MAX_LENGTH', 'TOTP_SECRET_MIN_LENGTH',
	'TOTP_PERIOD', 'TOTP_DIGITS', 'TOTP_ALGORITHM', 'TOTP_ISSUER', 'TOTP_LABEL',
	'QR_ERROR_CORRECTION', 'QR_BORDER', 'QR_BOX_SIZE', 'QR_FILL_COLOR', 'QR_BACK_COLOR',
	'PAYLOAD_FILE_EXTENSIONS', 'LOG_LEVEL', 'DEFAULT_OUTPUT_DIR',
]
