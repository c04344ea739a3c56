import time
import pytest
import pyotp
from qrpayload.lib.totp import (
    resolve_secret, generate_totp, generate_from_input, verify_totp,
    totp_progress, format_totp_code, generate_example_secret,
)
from qrpayload.lib.secret import parse_provisioning_uri, is_canonical
from qrpayload.lib.errors import InvalidSecret, MalformedURI

# RFC 6238 appendix B seed, "12345678901234567890"
RFC_SECRET = 'GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ'
RFC_HEX = '3132333435363738393031323334353637383930'


def test_rfc6238_vector():
    cfg = generate_totp(RFC_SECRET, timestamp=59)
    assert cfg.code == '287082'
    assert cfg.time_remaining == 1
    assert cfg.secret == RFC_SECRET


def test_hex_secret_gives_same_code():
    assert generate_totp(RFC_HEX, timestamp=1111111109).code == generate_totp(RFC_SECRET, timestamp=1111111109).code
    assert generate_totp(RFC_SECRET, timestamp=1111111109).code == '081804'


def test_otpauth_url_roundtrips_through_parser():
    cfg = generate_totp('jbsw y3dp ehpk 3pxp', timestamp=0, label='alice', issuer='ACME Co')
    p = parse_provisioning_uri(cfg.otpauth_url)
    assert p.secret == 'JBSWY3DPEHPK3PXP'
    assert p.issuer == 'ACME Co'
    assert p.label == 'ACME Co:alice'
    assert cfg.time_remaining == 30


def test_sha256_and_eight_digits():
    cfg = generate_totp(RFC_SECRET, timestamp=59, algorithm='sha256', digits=8)
    assert len(cfg.code) == 8


def test_unusable_secret_raises():
    with pytest.raises(InvalidSecret):
        generate_totp('')
    with pytest.raises(InvalidSecret):
        generate_totp(RFC_SECRET, algorithm='MD5')
    with pytest.raises(InvalidSecret):
        # one Base32 symbol cannot hold a whole byte
        generate_totp('A', timestamp=0)


@pytest.mark.parametrize('digits,period', [(0, 30), (11, 30), (6, 0), (6, -30)])
def test_out_of_range_digits_or_period_raise(digits, period):
    with pytest.raises(InvalidSecret):
        generate_totp(RFC_SECRET, timestamp=59, digits=digits, period=period)


def test_resolve_secret_defaults():
    p = resolve_secret('  jbswy3dpehpk3pxp ')
    assert p.secret == 'JBSWY3DPEHPK3PXP'
    assert (p.label, p.issuer, p.algorithm, p.digits, p.period) == ('User', 'QR Generator', 'SHA1', 6, 30)


def test_resolve_secret_from_uri():
    p = resolve_secret('otpauth://totp/Example:alice?secret=jbswy3dpehpk3pxp&issuer=Example&digits=8')
    assert p.secret == 'JBSWY3DPEHPK3PXP'
    assert p.label == 'Example:alice'
    assert p.issuer == 'Example'
    assert p.digits == 8


def test_resolve_secret_bad_uri():
    with pytest.raises(MalformedURI):
        resolve_secret('otpauth://totp/Example:alice?issuer=Example')


def test_generate_from_input_uses_uri_settings():
    cfg = generate_from_input(f'otpauth://totp/x?secret={RFC_SECRET}&digits=8&period=60', timestamp=89)
    assert cfg.code == '94287082'
    assert cfg.time_remaining == 31


def test_verify_totp():
    code = pyotp.TOTP(RFC_SECRET).now()
    assert verify_totp(RFC_SECRET, code)
    assert verify_totp(RFC_HEX, code)
    assert not verify_totp('', code)


def test_verify_totp_window():
    now = time.time()
    previous = pyotp.TOTP(RFC_SECRET).at(now - 30)
    assert verify_totp(RFC_SECRET, previous, window=1, timestamp=now)
    assert not verify_totp(RFC_SECRET, pyotp.TOTP(RFC_SECRET).at(now - 120), window=1, timestamp=now)


def test_progress_and_format():
    assert totp_progress(30) == 0
    assert totp_progress(15) == 50
    assert format_totp_code('123456') == '123 456'
    assert format_totp_code('1234') == '1234'


def test_example_secret():
    s = generate_example_secret()
    assert len(s) == 32 and is_canonical(s)


def test_padded_secret_is_accepted():
    assert generate_totp('GEZDGNBVGY3TQOJQ', timestamp=59).code == generate_totp('GEZDGNBVGY3TQOJQ====', timestamp=59).code
