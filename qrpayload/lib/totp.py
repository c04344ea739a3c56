"""TOTP code generation for normalized secrets.

The RFC 6238 arithmetic is pyotp's; this module only feeds it a
normalized secret and reads back the code, remaining seconds and the
otpauth:// URI that goes into the QR code.
"""
from __future__ import annotations
import hashlib, logging, time
from dataclasses import dataclass, replace
from typing import Optional
import pyotp
from config.settings import TOTP_PERIOD, TOTP_DIGITS, TOTP_ALGORITHM, TOTP_ISSUER, TOTP_LABEL
from .errors import InvalidSecret, SecretError
from .secret import ProvisioningURI, normalize, parse_provisioning_uri, URI_SCHEME, MAX_DIGITS

log = logging.getLogger(__name__)

_DIGESTS = {'SHA1': hashlib.sha1, 'SHA256': hashlib.sha256, 'SHA512': hashlib.sha512}

@dataclass(frozen=True)
class TOTPConfig:
	secret: str
	code: str
	time_remaining: int
	otpauth_url: str

def resolve_secret(text: str) -> ProvisioningURI:
	"""Accept a raw secret or an otpauth:// link; return it with a normalized secret.

	Missing label/issuer/algorithm/digits/period are filled with defaults.
	"""
	text = (text or '').strip()
	if text.lower().startswith(f'{URI_SCHEME}://'):
		uri = parse_provisioning_uri(text)
	else:
		uri = ProvisioningURI(secret=text, label='', issuer='')
	return replace(
		uri,
		secret=normalize(uri.secret),
		label=uri.label or TOTP_LABEL,
		issuer=uri.issuer or TOTP_ISSUER,
		algorithm=uri.algorithm or TOTP_ALGORITHM,
		digits=uri.digits or TOTP_DIGITS,
		period=uri.period or TOTP_PERIOD,
	)

def _build(secret: str, label: str, issuer: str, algorithm: str, digits: int, period: int) -> pyotp.TOTP:
	digest = _DIGESTS.get(algorithm.upper())
	if digest is None:
		raise InvalidSecret(f'Unsupported TOTP algorithm: {algorithm}')
	if not 1 <= digits <= MAX_DIGITS or period < 1:
		raise InvalidSecret(f'TOTP needs 1-{MAX_DIGITS} digits and a positive period, got digits={digits} period={period}')
	return pyotp.TOTP(secret.rstrip('='), digits=digits, digest=digest, name=label, issuer=issuer, interval=period)

def generate_totp(secret: str, timestamp: Optional[float] = None, label: str = TOTP_LABEL,
		issuer: str = TOTP_ISSUER, algorithm: str = TOTP_ALGORITHM, digits: int = TOTP_DIGITS,
		period: int = TOTP_PERIOD) -> TOTPConfig:
	"""Current code for `secret` (any accepted input shape) at `timestamp` seconds."""
	clean_secret = normalize(secret)
	now = int(timestamp if timestamp is not None else time.time())
	totp = _build(clean_secret, label, issuer, algorithm, digits, period)
	try:
		code = totp.at(now)
	except ValueError as e:  # binascii.Error from the Base32 decoder
		raise InvalidSecret(f'Secret cannot be used as a TOTP key: {e}') from e
	return TOTPConfig(
		secret=clean_secret,
		code=code,
		time_remaining=period - (now % period),
		otpauth_url=totp.provisioning_uri(),
	)

def generate_from_input(text: str, timestamp: Optional[float] = None) -> TOTPConfig:
	uri = resolve_secret(text)
	log.debug('generating TOTP for label=%s issuer=%s', uri.label, uri.issuer)
	# pyotp writes the issuer prefix itself
	prefix = f'{uri.issuer}:'
	account = uri.label[len(prefix):] if uri.label.startswith(prefix) else uri.label
	return generate_totp(uri.secret, timestamp, account, uri.issuer, uri.algorithm, uri.digits, uri.period)

def verify_totp(secret: str, token: str, window: int = 1, timestamp: Optional[float] = None) -> bool:
	try:
		totp = _build(normalize(secret), TOTP_LABEL, TOTP_ISSUER, TOTP_ALGORITHM, TOTP_DIGITS, TOTP_PERIOD)
		return totp.verify(token, for_time=timestamp, valid_window=window)
	except (SecretError, ValueError):
		return False

def totp_progress(time_remaining: int, period: int = TOTP_PERIOD) -> float:
	"""Elapsed share of the current window, in percent."""
	return (period - time_remaining) / period * 100

def format_totp_code(code: str) -> str:
	if len(code) != TOTP_DIGITS:
		return code
	return f"{code[:3]} {code[3:]}"

def generate_example_secret() -> str:
	return pyotp.random_base32()
