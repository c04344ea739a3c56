"""Password-based envelope encryption (PBKDF2-SHA256 + AES-256-GCM).

Envelope layout, Base64-encoded as one string:

	salt (16) | nonce (12) | ciphertext | GCM tag (16)

Salt and nonce are drawn fresh for every call, so the same plaintext and
password never produce the same envelope twice.
"""
from __future__ import annotations
import asyncio, base64, logging, math, secrets
from typing import Optional, Protocol, Tuple
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from config.settings import (
	DEFAULT_ITERATIONS, SALT_LENGTH, NONCE_LENGTH, KEY_LENGTH, AUTH_TAG_LENGTH, MIN_ENVELOPE_LENGTH,
	PASSWORD_MIN_LENGTH,
)
from .errors import (
	InvalidEncoding, TruncatedEnvelope, AuthenticationFailed, InvalidPlaintextEncoding
)
from .validation import validate_inputs, check_password

log = logging.getLogger(__name__)

class SecureRandomSource(Protocol):
	def fill(self, buffer: bytearray) -> None: ...

class SystemRandomSource:
	"""Operating-system CSPRNG."""

	def fill(self, buffer: bytearray) -> None:
		buffer[:] = secrets.token_bytes(len(buffer))

class DerivedKey:
	"""Key material for one (password, salt) pair. Use as a context manager so it is wiped."""
	__slots__ = ('_material',)

	def __init__(self, material: bytes):
		self._material = bytearray(material)

	@property
	def material(self) -> bytes:
		if not self._material:
			raise ValueError('Key has been wiped')
		return bytes(self._material)

	def wipe(self) -> None:
		for i in range(len(self._material)):
			self._material[i] = 0
		self._material = bytearray()

	def __enter__(self) -> 'DerivedKey':
		return self

	def __exit__(self, *exc) -> None:
		self.wipe()

	def __repr__(self) -> str:
		return '<DerivedKey>'

class EnvelopeCodec:
	def __init__(self, random_source: Optional[SecureRandomSource] = None):
		self._random = random_source or SystemRandomSource()

	def _random_bytes(self, length: int) -> bytes:
		buf = bytearray(length)
		self._random.fill(buf)
		return bytes(buf)

	def generate_salt(self) -> bytes:
		return self._random_bytes(SALT_LENGTH)

	def generate_nonce(self) -> bytes:
		return self._random_bytes(NONCE_LENGTH)

	def derive_key(self, password: str, salt: bytes) -> DerivedKey:
		kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=KEY_LENGTH, salt=salt, iterations=DEFAULT_ITERATIONS)
		return DerivedKey(kdf.derive(password.encode('utf-8')))

	def seal(self, data: bytes, password: str) -> bytes:
		"""Encrypt raw bytes into salt + nonce + ciphertext + tag."""
		salt = self.generate_salt()
		nonce = self.generate_nonce()
		with self.derive_key(password, salt) as key:
			enc = Cipher(algorithms.AES(key.material), modes.GCM(nonce)).encryptor()
			ct = enc.update(data) + enc.finalize()
		return salt + nonce + ct + enc.tag

	def open(self, blob: bytes, password: str) -> bytes:
		"""Inverse of seal. Length is checked before the key is derived."""
		if len(blob) < MIN_ENVELOPE_LENGTH:
			raise TruncatedEnvelope(f'Envelope too short: {len(blob)} bytes, need at least {MIN_ENVELOPE_LENGTH}')
		salt = blob[:SALT_LENGTH]
		nonce = blob[SALT_LENGTH:SALT_LENGTH + NONCE_LENGTH]
		ct = blob[SALT_LENGTH + NONCE_LENGTH:-AUTH_TAG_LENGTH]
		tag = blob[-AUTH_TAG_LENGTH:]
		with self.derive_key(password, salt) as key:
			dec = Cipher(algorithms.AES(key.material), modes.GCM(nonce, tag)).decryptor()
			try:
				return dec.update(ct) + dec.finalize()
			except InvalidTag:
				log.info('envelope failed authentication')
				raise AuthenticationFailed('Decryption failed: wrong password or damaged data') from None

	def encrypt(self, plaintext: str, password: str) -> str:
		validate_inputs(plaintext, password)
		blob = self.seal(plaintext.encode('utf-8'), password)
		log.debug('sealed envelope of %d bytes', len(blob))
		return base64.b64encode(blob).decode('ascii')

	def decrypt(self, envelope: str, password: str) -> str:
		blob = decode_envelope(envelope)
		check_password(password)
		data = self.open(blob, password)
		try:
			return data.decode('utf-8')
		except UnicodeDecodeError as e:
			raise InvalidPlaintextEncoding('Decrypted data is not valid UTF-8 text') from e

	async def encrypt_async(self, plaintext: str, password: str) -> str:
		return await asyncio.to_thread(self.encrypt, plaintext, password)

	async def decrypt_async(self, envelope: str, password: str) -> str:
		return await asyncio.to_thread(self.decrypt, envelope, password)

def decode_envelope(envelope: str) -> bytes:
	"""Strict Base64 decode. Raises InvalidEncoding."""
	if not isinstance(envelope, (str, bytes)):
		raise InvalidEncoding('Envelope must be a Base64 string')
	try:
		return base64.b64decode(envelope.strip(), validate=True)
	except ValueError as e:  # binascii.Error, or non-ASCII input
		raise InvalidEncoding('Envelope is not valid Base64') from e

_codec = EnvelopeCodec()

def encrypt(plaintext: str, password: str) -> str:
	return _codec.encrypt(plaintext, password)

def decrypt(envelope: str, password: str) -> str:
	return _codec.decrypt(envelope, password)

async def encrypt_async(plaintext: str, password: str) -> str:
	return await _codec.encrypt_async(plaintext, password)

async def decrypt_async(envelope: str, password: str) -> str:
	return await _codec.decrypt_async(envelope, password)

def estimate_envelope_size(plaintext_byte_length: int) -> int:
	"""Approximate Base64 length of an envelope, for display only."""
	raw = SALT_LENGTH + NONCE_LENGTH + plaintext_byte_length + AUTH_TAG_LENGTH
	return math.ceil(raw * 4 / 3)

def is_valid_envelope(envelope: str) -> bool:
	try:
		return len(decode_envelope(envelope)) >= MIN_ENVELOPE_LENGTH
	except InvalidEncoding:
		return False

def envelope_summary(envelope: str, max_length: int = 50) -> str:
	if len(envelope) <= max_length:
		return envelope
	half = max_length // 2 - 2
	return f"{envelope[:half]}...{envelope[-half:]}"

_STRENGTH_LABELS = ('too weak', 'too weak', 'weak', 'fair', 'strong', 'very strong')

def check_password_strength(password: str) -> Tuple[int, str]:
	"""Count the strength criteria a password meets (0-5) and describe what is missing.

	Criteria: 8+ characters, 12+ characters, mixed case, a digit, a symbol.
	"""
	checks = [
		(len(password) >= PASSWORD_MIN_LENGTH, f'at least {PASSWORD_MIN_LENGTH} characters'),
		(len(password) >= 12, '12 or more characters'),
		(any(c.islower() for c in password) and any(c.isupper() for c in password), 'upper and lower case'),
		(any(c.isdigit() for c in password), 'a digit'),
		(any(not c.isalnum() for c in password), 'a symbol'),
	]
	score = sum(1 for ok, _ in checks if ok)
	missing = [hint for ok, hint in checks if not ok]
	text = f"{_STRENGTH_LABELS[score]} ({score}/5)"
	if missing:
		text += '; add ' + ', '.join(missing)
	return score, text
