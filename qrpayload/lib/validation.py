"""Input checks run before any normalization or cryptographic work."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from config.settings import PASSWORD_MIN_LENGTH, STATIC_MAX_LENGTH, TOTP_SECRET_MIN_LENGTH
from .errors import EmptyPlaintext, WeakPassword, InputTooLong, InvalidSecret
from .secret import detect_format

@dataclass(frozen=True)
class ValidationResult:
	ok: bool = True
	message: Optional[str] = None

def validate_inputs(plaintext: str, password: str) -> ValidationResult:
	"""Check an encryption request. Raises EmptyPlaintext or WeakPassword."""
	if not plaintext or not plaintext.strip():
		raise EmptyPlaintext('Nothing to encrypt: plaintext is empty')
	check_password(password)
	return ValidationResult()

def check_password(password: str) -> None:
	if not password or len(password) < PASSWORD_MIN_LENGTH:
		raise WeakPassword(f'Password must be at least {PASSWORD_MIN_LENGTH} characters')

def validate_static_text(text: str) -> ValidationResult:
	if not text or not text.strip():
		raise EmptyPlaintext('Nothing to encode: text is empty')
	if len(text) > STATIC_MAX_LENGTH:
		raise InputTooLong(f'Text must be at most {STATIC_MAX_LENGTH} characters (got {len(text)})')
	return ValidationResult()

_FORMAT_HINTS = {
	'canonical': 'standard Base32',
	'hexadecimal': 'hexadecimal, will be converted',
	'word_phrase': 'multiple words, will be converted',
	'ambiguous': 'mixed, best-effort conversion',
}

def validate_secret(secret: str) -> ValidationResult:
	"""Check a TOTP secret and describe how it will be interpreted."""
	if not secret or not secret.strip():
		raise InvalidSecret('Secret is empty')
	if len(secret.strip()) < TOTP_SECRET_MIN_LENGTH:
		raise InvalidSecret(f'Secret must be at least {TOTP_SECRET_MIN_LENGTH} characters')
	return ValidationResult(True, _FORMAT_HINTS[detect_format(secret).value])
