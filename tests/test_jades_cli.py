import json

import pytest

import cert_builder
import jades
import jades_cli
import signing
import verification


@pytest.fixture
def pfx_path(tmp_path, pfx_bytes):
    path = tmp_path / 'signer.pfx'
    path.write_bytes(pfx_bytes)

    return path


def test_sign_example_payload_from_environment(pfx_path, monkeypatch, capsys):
    monkeypatch.setenv(jades_cli.ENV_CERTIFICATE_PATH, str(pfx_path))
    monkeypatch.setenv(jades_cli.ENV_CERTIFICATE_PASSWORD, cert_builder.PFX_PASSWORD)

    assert jades_cli.main([]) == 0

    jws = json.loads(capsys.readouterr().out)

    assert json.loads(signing.base64url_decode(jws['payload'])) == jades.EXAMPLE_PAYLOAD
    assert verification.verify_general(jws)


def test_sign_payload_file_to_output(pfx_path, tmp_path):
    payload_path = tmp_path / 'payload.json'
    payload_path.write_text(json.dumps({'refKey': 'abc'}), encoding='utf-8')
    output_path = tmp_path / 'signature.json'

    assert jades_cli.main([str(payload_path), '--certificate', str(pfx_path),
                           '--password', cert_builder.PFX_PASSWORD, '--output', str(output_path), '--verify']) == 0

    jws = json.loads(output_path.read_text(encoding='utf-8'))

    assert json.loads(signing.base64url_decode(jws['payload'])) == {'refKey': 'abc'}


def test_wrong_password(pfx_path, capsys):
    assert jades_cli.main(['--certificate', str(pfx_path), '--password', 'nope']) == 1

    assert '[pfx]' in capsys.readouterr().err


def test_missing_certificate(monkeypatch, capsys):
    monkeypatch.delenv(jades_cli.ENV_CERTIFICATE_PATH, raising=False)

    assert jades_cli.main([]) == 2

    assert jades_cli.ENV_CERTIFICATE_PATH in capsys.readouterr().err


def test_unreadable_certificate(tmp_path, capsys):
    assert jades_cli.main(['--certificate', str(tmp_path / 'missing.pfx'), '--password', 'x']) == 1

    assert 'I/O error' in capsys.readouterr().err


def test_invalid_payload(pfx_path, tmp_path, capsys):
    payload_path = tmp_path / 'payload.json'
    payload_path.write_text('{not json', encoding='utf-8')

    assert jades_cli.main([str(payload_path), '--certificate', str(pfx_path),
                           '--password', cert_builder.PFX_PASSWORD]) == 1

    assert 'Could not parse JSON document' in capsys.readouterr().err


def test_unwritable_output(pfx_path, tmp_path, capsys):
    output_path = tmp_path / 'missing' / 'signature.json'

    assert jades_cli.main(['--certificate', str(pfx_path), '--password', cert_builder.PFX_PASSWORD,
                           '--output', str(output_path)]) == 1

    assert 'I/O error writing' in capsys.readouterr().err


def test_verify_malformed_header(pfx_path, monkeypatch, capsys):
    def broken_signature(pfx_bytes, password, payload):
        return {'payload': 'e30', 'signatures': [{'protected': '!!', 'signature': ''}]}

    monkeypatch.setattr(jades, 'sign_payload', broken_signature)

    assert jades_cli.main(['--certificate', str(pfx_path), '--password', cert_builder.PFX_PASSWORD,
                           '--verify']) == 1

    assert 'Signature verification failed' in capsys.readouterr().err
