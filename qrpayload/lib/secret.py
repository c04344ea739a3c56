"""TOTP secret normalization.

Users paste secrets in whatever shape their provider printed them: Base32
with spaces or dashes, a hex dump, a pass phrase, or a full otpauth:// link.
Everything here reduces that input to the Base32 string a TOTP generator
expects. The interpretation order is fixed; authenticator apps fed the same
provisioning URI must end up with the same key, so do not add heuristics.
"""
from __future__ import annotations
import re, logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional
from urllib.parse import urlsplit, parse_qs, unquote
from .errors import InvalidSecret, MalformedURI

log = logging.getLogger(__name__)

ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ234567'
PAD = '='
URI_SCHEME = 'otpauth'
URI_AUTHORITY = 'totp'
MAX_DIGITS = 10

_SEPARATORS = re.compile(r'[\s\-_]')
_WHITESPACE = re.compile(r'\s+')
_CANONICAL = re.compile(r'^[A-Z2-7]+=*$')
_HEX = re.compile(r'^[0-9A-F]+$')

# A normalized secret is a plain str over ALPHABET with optional trailing PAD.
NormalizedSecret = str

class SecretFormat(StrEnum):
	CANONICAL = 'canonical'
	HEXADECIMAL = 'hexadecimal'
	WORD_PHRASE = 'word_phrase'
	AMBIGUOUS = 'ambiguous'

def clean(raw: str) -> str:
	"""Strip whitespace, hyphens and underscores; uppercase the rest."""
	return _SEPARATORS.sub('', raw).upper()

def is_canonical(text: str) -> bool:
	return bool(_CANONICAL.match(text))

def detect_format(raw: str) -> SecretFormat:
	cleaned = clean(raw)
	if _CANONICAL.match(cleaned):
		return SecretFormat.CANONICAL
	if _HEX.match(cleaned):
		return SecretFormat.HEXADECIMAL
	if len([t for t in raw.split(' ') if t]) >= 2:
		return SecretFormat.WORD_PHRASE
	return SecretFormat.AMBIGUOUS

def pack_base32(data: bytes) -> str:
	"""Pack bytes into Base32 symbols, 5 bits at a time, MSB first.

	A trailing group of 1-4 bits is zero-filled on the right into one last
	symbol. No '=' padding is emitted.
	"""
	out = []
	buffer = 0; bits = 0
	for byte in data:
		buffer = (buffer << 8) | byte
		bits += 8
		while bits >= 5:
			out.append(ALPHABET[(buffer >> (bits - 5)) & 0b11111])
			bits -= 5
		buffer &= (1 << bits) - 1
	if bits:
		out.append(ALPHABET[(buffer << (5 - bits)) & 0b11111])
	return ''.join(out)

def _as_canonical(raw: str) -> str:
	cleaned = clean(raw)
	if not _CANONICAL.match(cleaned):
		raise InvalidSecret('Secret is not Base32')
	return cleaned

def _as_hex(raw: str) -> str:
	cleaned = clean(raw)
	if not _HEX.match(cleaned):
		raise InvalidSecret('Secret is not hexadecimal')
	if len(cleaned) % 2:
		raise InvalidSecret(f'Hexadecimal secret has an odd number of digits ({len(cleaned)})')
	return pack_base32(bytes.fromhex(cleaned))

def _as_text(raw: str) -> str:
	combined = _WHITESPACE.sub('', raw).upper()
	if not combined:
		raise InvalidSecret('Secret is empty')
	if _CANONICAL.match(combined):
		return combined
	return pack_base32(combined.encode('utf-8'))

_STRATEGIES = {
	SecretFormat.CANONICAL: (_as_canonical,),
	SecretFormat.HEXADECIMAL: (_as_hex,),
	SecretFormat.WORD_PHRASE: (_as_text,),
	SecretFormat.AMBIGUOUS: (_as_canonical, _as_hex, _as_text),
}

def normalize(raw: str) -> NormalizedSecret:
	"""Rewrite a user-supplied secret as Base32. Raises InvalidSecret."""
	if not raw or not clean(raw):
		raise InvalidSecret('Secret is empty')
	fmt = detect_format(raw)
	log.debug('secret format detected: %s', fmt)
	strategies = _STRATEGIES[fmt]
	for attempt in strategies[:-1]:
		try:
			return attempt(raw)
		except InvalidSecret:
			log.debug('%s interpretation rejected, trying next', attempt.__name__)
	return strategies[-1](raw)


@dataclass(frozen=True)
class ProvisioningURI:
	secret: str
	label: str
	issuer: str
	algorithm: Optional[str] = None
	digits: Optional[int] = None
	period: Optional[int] = None

def _int_param(params: dict, name: str, low: int, high: Optional[int] = None) -> Optional[int]:
	values = params.get(name)
	if not values:
		return None
	try:
		value = int(values[0])
	except ValueError as e:
		raise MalformedURI(f'Parameter {name!r} must be an integer, got {values[0]!r}') from e
	if value < low or (high is not None and value > high):
		bounds = f'{low}..{high}' if high is not None else f'>= {low}'
		raise MalformedURI(f'Parameter {name!r} must be {bounds}, got {value}')
	return value

def parse_provisioning_uri(uri: str) -> ProvisioningURI:
	"""Parse an otpauth://totp/<label>?secret=... link. Raises MalformedURI."""
	if not isinstance(uri, str) or not uri.strip():
		raise MalformedURI('URI is empty')
	try:
		parts = urlsplit(uri.strip())
	except ValueError as e:
		raise MalformedURI(f'Not a valid URI: {e}') from e
	if parts.scheme != URI_SCHEME:
		raise MalformedURI(f'Expected scheme {URI_SCHEME!r}, got {parts.scheme or "none"!r}')
	if parts.netloc.lower() != URI_AUTHORITY:
		raise MalformedURI(f'Expected {URI_SCHEME}://{URI_AUTHORITY}/, got authority {parts.netloc!r}')
	params = parse_qs(parts.query)
	secret = (params.get('secret') or [''])[0].strip()
	if not secret:
		raise MalformedURI('URI has no secret parameter')
	segments = [s for s in parts.path.split('/') if s]
	label = unquote(segments[0]) if segments else ''
	issuer = (params.get('issuer') or [''])[0]
	if not issuer and ':' in label:
		# Key URI format allows the issuer only as a label prefix
		issuer = label.split(':', 1)[0]
	algorithm = (params.get('algorithm') or [None])[0]
	return ProvisioningURI(
		secret=secret,
		label=label,
		issuer=issuer,
		algorithm=algorithm.upper() if algorithm else None,
		digits=_int_param(params, 'digits', 1, MAX_DIGITS),
		period=_int_param(params, 'period', 1),
	)
