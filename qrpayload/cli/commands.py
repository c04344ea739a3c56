"""CLI commands implemented with click.

Three payload kinds, one command each:
- `static`  plain text
- `totp`    otpauth:// provisioning link (plus the current code)
- `encrypt` password-protected envelope; `decrypt` reverses it
"""
from __future__ import annotations
import logging, click
from pathlib import Path
from config.settings import LOG_LEVEL, DEFAULT_OUTPUT_DIR
from qrpayload.lib.errors import PayloadError
from qrpayload.lib.secret import detect_format, normalize, parse_provisioning_uri
from qrpayload.lib.validation import validate_static_text, validate_secret
from qrpayload.lib.crypto import (
	encrypt, decrypt, estimate_envelope_size, envelope_summary, check_password_strength
)
from qrpayload.lib.totp import generate_from_input, format_totp_code, totp_progress
from qrpayload.lib.render import render_ascii, render_file, read_payload_file

log = logging.getLogger(__name__)

def _output_path(out: str) -> Path:
	path = Path(out)
	if path.parent == Path('.'):
		path = DEFAULT_OUTPUT_DIR / path
	path.parent.mkdir(parents=True, exist_ok=True)
	return path

def _emit(data: str, out: str | None) -> None:
	if out:
		click.echo(f'Wrote {render_file(data, _output_path(out))}')
	else:
		click.echo(render_ascii(data), nl=False)

@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Debug logging.')
def cli(verbose):
	"""qrpayload: text, TOTP and encrypted QR payloads"""
	logging.basicConfig(
		level=logging.DEBUG if verbose else LOG_LEVEL,
		format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
		datefmt='%H:%M:%S',
	)

@cli.command()
@click.argument('secret')
def detect(secret):
	"""Show how a TOTP secret will be interpreted."""
	try:
		res = validate_secret(secret)
		click.echo(f'{detect_format(secret).value}: {res.message}')
	except PayloadError as e:
		raise click.ClickException(str(e))

@cli.command('normalize')
@click.argument('secret')
def normalize_cmd(secret):
	"""Print the Base32 form of a TOTP secret."""
	try:
		click.echo(normalize(secret))
	except PayloadError as e:
		raise click.ClickException(str(e))

@cli.command()
@click.argument('uri')
def uri(uri):
	"""Parse an otpauth://totp/ link."""
	try:
		p = parse_provisioning_uri(uri)
	except PayloadError as e:
		raise click.ClickException(str(e))
	click.echo(f"Label: {p.label}\nIssuer: {p.issuer or '-'}\nSecret: {p.secret}")
	for name in ('algorithm', 'digits', 'period'):
		value = getattr(p, name)
		if value is not None:
			click.echo(f'{name.capitalize()}: {value}')

@cli.command()
@click.argument('text')
@click.option('--out', help='Write a .png or .svg instead of printing.')
def static(text, out):
	"""Encode plain text or a URL."""
	try:
		validate_static_text(text)
		_emit(text, out)
	except PayloadError as e:
		raise click.ClickException(str(e))

@cli.command()
@click.argument('secret')
@click.option('--out', help='Write a .png or .svg instead of printing.')
@click.option('--code-only', is_flag=True, help='Print the current code and nothing else.')
def totp(secret, out, code_only):
	"""Provisioning QR for a secret or otpauth:// link, plus the current code."""
	try:
		config = generate_from_input(secret)
		if code_only:
			click.echo(config.code)
			return
		click.echo(f"Secret: {config.secret}\nCode: {format_totp_code(config.code)} "
			f"({config.time_remaining}s left, {totp_progress(config.time_remaining):.0f}% elapsed)\n"
			f"URI: {config.otpauth_url}")
		_emit(config.otpauth_url, out)
	except PayloadError as e:
		raise click.ClickException(str(e))

@cli.command('encrypt')
@click.option('--text', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--out', help='Write a .png or .svg instead of printing.')
@click.option('--raw', is_flag=True, help='Print only the envelope string.')
def encrypt_cmd(text, password, out, raw):
	"""Encrypt text into a password-protected envelope."""
	try:
		envelope = encrypt(text, password)
		if raw:
			click.echo(envelope)
			return
		click.echo(f'Envelope ({len(envelope)} chars): {envelope_summary(envelope)}')
		_emit(envelope, out)
	except PayloadError as e:
		raise click.ClickException(str(e))

@cli.command('decrypt')
@click.argument('envelope', required=False)
@click.option('--file', 'path', type=click.Path(dir_okay=False, path_type=Path), help='Read the envelope from a .txt/.json/.qr file.')
@click.option('--password', prompt=True, hide_input=True)
def decrypt_cmd(envelope, path, password):
	"""Decrypt an envelope given inline or via --file."""
	if not envelope and not path:
		raise click.UsageError('Give an ENVELOPE argument or --file')
	try:
		if path:
			envelope = read_payload_file(path)
		click.echo(decrypt(envelope, password))
	except PayloadError as e:
		raise click.ClickException(str(e))

@cli.command()
@click.argument('text')
def estimate(text):
	"""Estimate the envelope length for TEXT."""
	click.echo(estimate_envelope_size(len(text.encode('utf-8'))))

@cli.command('pw-strength')
@click.argument('password')
def pw_strength_cmd(password):
	score, fb = check_password_strength(password)
	click.echo(f"Score: {score}/5 -> {fb}")
