"""QR code rendering and payload file reading.

Drawing the code is the qrcode package's job; this module picks the
settings and maps its failures onto RenderError.
"""
from __future__ import annotations
import io, logging
from dataclasses import dataclass
from pathlib import Path
import qrcode
import qrcode.image.svg
from qrcode.exceptions import DataOverflowError
from config.settings import (
	QR_ERROR_CORRECTION, QR_BORDER, QR_BOX_SIZE, QR_FILL_COLOR, QR_BACK_COLOR, PAYLOAD_FILE_EXTENSIONS
)
from .errors import RenderError, PayloadFileError

log = logging.getLogger(__name__)

_ERROR_CORRECTION = {
	'L': qrcode.constants.ERROR_CORRECT_L,
	'M': qrcode.constants.ERROR_CORRECT_M,
	'Q': qrcode.constants.ERROR_CORRECT_Q,
	'H': qrcode.constants.ERROR_CORRECT_H,
}

@dataclass(frozen=True)
class QRConfig:
	error_correction: str = QR_ERROR_CORRECTION
	border: int = QR_BORDER
	box_size: int = QR_BOX_SIZE
	fill_color: str = QR_FILL_COLOR
	back_color: str = QR_BACK_COLOR

def build_qr(data: str, config: QRConfig | None = None) -> qrcode.QRCode:
	config = config or QRConfig()
	level = _ERROR_CORRECTION.get(config.error_correction.upper())
	if level is None:
		raise RenderError(f'Unknown error correction level: {config.error_correction}')
	if not data:
		raise RenderError('Nothing to render')
	qr = qrcode.QRCode(version=None, error_correction=level, box_size=config.box_size, border=config.border)
	qr.add_data(data)
	try:
		qr.make(fit=True)
	except (DataOverflowError, ValueError) as e:  # qrcode 8 raises ValueError past version 40
		raise RenderError(f'Payload of {len(data)} characters does not fit in a QR code') from e
	log.debug('built QR version %s for %d characters', qr.version, len(data))
	return qr

def render_png(data: str, path: Path, config: QRConfig | None = None) -> Path:
	config = config or QRConfig()
	img = build_qr(data, config).make_image(fill_color=config.fill_color, back_color=config.back_color)
	path = Path(path)
	img.save(str(path), format='PNG')
	return path

def render_svg(data: str, path: Path, config: QRConfig | None = None) -> Path:
	img = build_qr(data, config).make_image(image_factory=qrcode.image.svg.SvgPathImage)
	path = Path(path)
	path.write_bytes(img.to_string(encoding='UTF-8'))
	return path

def render_ascii(data: str, config: QRConfig | None = None) -> str:
	out = io.StringIO()
	build_qr(data, config).print_ascii(out=out)
	return out.getvalue()

def render_file(data: str, path: Path, config: QRConfig | None = None) -> Path:
	"""Write `data` as an image; the format follows the file suffix."""
	path = Path(path)
	suffix = path.suffix.lower()
	if suffix == '.png':
		return render_png(data, path, config)
	if suffix == '.svg':
		return render_svg(data, path, config)
	raise RenderError(f'Unsupported image format {suffix or "(none)"}; use .png or .svg')

def read_payload_file(path: Path) -> str:
	"""Read an envelope saved as text (.txt, .json or .qr)."""
	path = Path(path)
	if path.suffix.lower() not in PAYLOAD_FILE_EXTENSIONS:
		raise PayloadFileError(f'Unsupported payload file {path.name}; expected one of {", ".join(PAYLOAD_FILE_EXTENSIONS)}')
	try:
		text = path.read_text(encoding='utf-8')
	except (OSError, UnicodeDecodeError) as e:
		raise PayloadFileError(f'Cannot read {path}: {e}') from e
	return text.strip()
