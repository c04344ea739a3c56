"""Error types shared by the normalizer and the envelope codec."""
from __future__ import annotations

class PayloadError(Exception):
	"""Base for every failure raised by qrpayload."""

class SecretError(PayloadError): ...

class InvalidSecret(SecretError): ...

class MalformedURI(SecretError): ...

class CryptoError(PayloadError):
	"""Base for codec failures (input validation and envelope handling)."""

class ValidationError(CryptoError): ...

class EmptyPlaintext(ValidationError): ...

class WeakPassword(ValidationError): ...

class InputTooLong(ValidationError): ...

class EnvelopeError(CryptoError): ...

class InvalidEncoding(EnvelopeError): ...

class TruncatedEnvelope(EnvelopeError): ...

class AuthenticationFailed(EnvelopeError):
	"""Tag did not verify. Deliberately silent on whether the password or the data was wrong."""

class InvalidPlaintextEncoding(EnvelopeError): ...

class RenderError(PayloadError): ...

class PayloadFileError(PayloadError): ...
