from click.testing import CliRunner
from qrpayload.cli.commands import cli

PW = 'correct horse battery staple'


def test_cli_help():
    r = CliRunner().invoke(cli, ['--help'])
    assert r.exit_code == 0
    for name in ('static', 'totp', 'encrypt', 'decrypt'):
        assert name in r.output


def test_detect_and_normalize():
    runner = CliRunner()
    r = runner.invoke(cli, ['detect', '48656c6c6f20576f726c64'])
    assert r.exit_code == 0
    assert r.output.startswith('hexadecimal')
    r = runner.invoke(cli, ['normalize', '48656c6c6f20576f726c64'])
    assert r.output.strip() == 'JBSWY3DPEBLW64TMMQ'
    r = runner.invoke(cli, ['normalize', '--', '---'])
    assert r.exit_code == 1
    assert 'Error: Secret is empty' in r.output


def test_uri_command():
    r = CliRunner().invoke(cli, ['uri', 'otpauth://totp/Example:user@example.com?secret=JBSWY3DPEHPK3PXP&issuer=Example&digits=8'])
    assert r.exit_code == 0
    assert 'Label: Example:user@example.com' in r.output
    assert 'Issuer: Example' in r.output
    assert 'Digits: 8' in r.output
    bad = CliRunner().invoke(cli, ['uri', 'otpauth://hotp/x?secret=A'])
    assert bad.exit_code == 1


def test_static_prints_code_and_limits_length():
    runner = CliRunner()
    r = runner.invoke(cli, ['static', 'https://example.com'])
    assert r.exit_code == 0
    assert len(r.output.splitlines()) > 10
    r = runner.invoke(cli, ['static', 'x' * 501])
    assert r.exit_code == 1
    assert 'at most 500' in r.output


def test_static_writes_file(tmp_path):
    target = tmp_path / 'out' / 'hello.png'
    r = CliRunner().invoke(cli, ['static', 'hello', '--out', str(target)])
    assert r.exit_code == 0
    assert target.read_bytes().startswith(b'\x89PNG')


def test_bare_output_name_goes_to_output_dir(monkeypatch, tmp_path):
    monkeypatch.setattr('qrpayload.cli.commands.DEFAULT_OUTPUT_DIR', tmp_path / 'qr')
    r = CliRunner().invoke(cli, ['static', 'hello', '--out', 'hello.svg'])
    assert r.exit_code == 0
    assert (tmp_path / 'qr' / 'hello.svg').exists()


def test_totp_code_only():
    r = CliRunner().invoke(cli, ['totp', 'JBSWY3DPEHPK3PXP', '--code-only'])
    assert r.exit_code == 0
    code = r.output.strip()
    assert len(code) == 6 and code.isdigit()


def test_totp_full_output():
    r = CliRunner().invoke(cli, ['totp', 'otpauth://totp/Example:alice?secret=jbswy3dpehpk3pxp&issuer=Example'])
    assert r.exit_code == 0
    assert 'Secret: JBSWY3DPEHPK3PXP' in r.output
    assert 'URI: otpauth://totp/Example:alice?' in r.output
    assert 'secret=JBSWY3DPEHPK3PXP' in r.output


def test_totp_rejects_out_of_range_digits():
    r = CliRunner().invoke(cli, ['totp', 'otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&digits=12'])
    assert r.exit_code == 1
    assert "Error: Parameter 'digits' must be 1..10" in r.output


def test_encrypt_decrypt_roundtrip():
    runner = CliRunner()
    enc = runner.invoke(cli, ['encrypt', '--raw', '--text', 'attack at dawn', '--password', PW])
    assert enc.exit_code == 0
    envelope = enc.output.strip()
    dec = runner.invoke(cli, ['decrypt', envelope], input=f'{PW}\n')
    assert dec.exit_code == 0
    assert dec.output.strip().endswith('attack at dawn')
    wrong = runner.invoke(cli, ['decrypt', envelope, '--password', 'wrong password'])
    assert wrong.exit_code == 1
    assert 'wrong password or damaged data' in wrong.output


def test_encrypt_prompts_and_rejects_weak_password():
    r = CliRunner().invoke(cli, ['encrypt', '--raw'], input='hello\nshort\nshort\n')
    assert r.exit_code == 1
    assert 'at least 8 characters' in r.output


def test_encrypt_summary_and_qr():
    r = CliRunner().invoke(cli, ['encrypt', '--text', 'attack at dawn', '--password', PW])
    assert r.exit_code == 0
    assert 'Envelope (80 chars)' in r.output
    assert '...' in r.output


def test_encrypt_envelope_too_large_for_qr():
    r = CliRunner().invoke(cli, ['encrypt', '--text', 'x' * 3000, '--password', PW])
    assert r.exit_code == 1
    assert 'does not fit in a QR code' in r.output


def test_decrypt_from_file(tmp_path):
    runner = CliRunner()
    envelope = runner.invoke(cli, ['encrypt', '--raw', '--text', 'from disk', '--password', PW]).output.strip()
    p = tmp_path / 'payload.txt'
    p.write_text(envelope + '\n')
    r = runner.invoke(cli, ['decrypt', '--file', str(p), '--password', PW])
    assert r.exit_code == 0
    assert r.output.strip() == 'from disk'


def test_decrypt_needs_input():
    r = CliRunner().invoke(cli, ['decrypt', '--password', PW])
    assert r.exit_code == 2


def test_decrypt_truncated():
    r = CliRunner().invoke(cli, ['decrypt', 'QUJD', '--password', PW])
    assert r.exit_code == 1
    assert 'too short' in r.output


def test_estimate_and_pw_strength():
    runner = CliRunner()
    assert runner.invoke(cli, ['estimate', 'attack at dawn']).output.strip() == '78'
    r = runner.invoke(cli, ['pw-strength', 'weak'])
    assert r.exit_code == 0
    assert 'Score: 0/5 -> too weak' in r.output
