import hashlib

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from pyasn1.codec.der.encoder import encode
from pyasn1.type import char, univ
from pyasn1_alt_modules import rfc5280

import cert_builder
import certificate
import mappings
from errors import EncodingError, UnknownOidError


@pytest.fixture(scope='module')
def signer_key():
    return cert_builder.generate_rsa_key()


def _self_signed(private_key, serial_number=1, name=None):
    return certificate.Certificate(cert_builder.build_root(private_key, name, serial_number).der)


def test_issuer_attributes(pki):
    leaf = certificate.Certificate(pki.leaf.der)

    assert certificate.issuer_attributes(leaf) == [
        certificate.IssuerAttribute('countryName', '2.5.4.6', b'NL', 19),
        certificate.IssuerAttribute('organizationName', '2.5.4.10', b'Snakefoot Test PKI', 12),
        certificate.IssuerAttribute('commonName', '2.5.4.3', b'Snakefoot Test Issuing CA', 12),
    ]


def test_issuer_attributes_unknown_oid(signer_key):
    name = cert_builder.build_rdn_sequence([
        (mappings.ATTRIBUTE_NAME_TO_OID_MAPPINGS['commonName'], 'Private Attribute CA'),
        ('1.3.6.1.4.1.99999.1', 'not registered'),
    ])

    cert = _self_signed(signer_key, name=name)

    with pytest.raises(UnknownOidError, match='1.3.6.1.4.1.99999.1'):
        certificate.issuer_attributes(cert)


def test_issuer_attributes_multi_valued_rdn(signer_key):
    rdn = rfc5280.RelativeDistinguishedName()

    for oid, value in ((rfc5280.id_at_organizationName, 'Snakefoot'), (rfc5280.id_at_commonName, 'Multi')):
        atv = rfc5280.AttributeTypeAndValue()
        atv['type'] = oid
        atv['value'] = encode(char.UTF8String(value))
        rdn.append(atv)

    name = rfc5280.RDNSequence()
    name.append(rdn)

    cert = _self_signed(signer_key, name=name)

    attributes = certificate.issuer_attributes(cert)

    assert {a.name for a in attributes} == {'organizationName', 'commonName'}
    assert {a.value for a in attributes} == {b'Snakefoot', b'Multi'}


def test_issuer_attributes_non_string_value(signer_key):
    name = cert_builder.build_rdn_sequence([
        (mappings.ATTRIBUTE_NAME_TO_OID_MAPPINGS['commonName'], univ.Integer(5)),
    ])

    cert = _self_signed(signer_key, name=name)

    with pytest.raises(EncodingError):
        certificate.issuer_attributes(cert)

    assert 'commonName=' in repr(cert)


@pytest.mark.parametrize('serial_number,expected', [
    (0, '00'),
    (1, '01'),
    (127, '7f'),
    (128, '0080'),
    (256, '0100'),
    (0x80C0FFEE, '0080c0ffee'),
    (-1, 'ff'),
    (-128, '80'),
    (-129, 'ff7f'),
])
def test_serial_number_bytes(signer_key, serial_number, expected):
    cert = _self_signed(signer_key, serial_number)

    assert cert.serial_number == serial_number
    assert certificate.serial_number_bytes(cert) == bytes.fromhex(expected)


def test_sha256_thumbprint(pki):
    leaf = certificate.Certificate(pki.leaf.der)

    assert certificate.sha256_thumbprint(leaf) == hashlib.sha256(pki.leaf.der).hexdigest()


def test_load_certificate_pem(pki):
    pem = x509.load_der_x509_certificate(pki.leaf.der).public_bytes(serialization.Encoding.PEM)

    cert = certificate.load_certificate(pem)

    assert certificate.der_bytes(cert) == pki.leaf.der
    assert cert == certificate.load_certificate(pki.leaf.der)


def test_load_certificate_pem_without_body():
    with pytest.raises(EncodingError):
        certificate.load_certificate(b'-----BEGIN CERTIFICATE-----\n-----END CERTIFICATE-----\n')


def test_invalid_der():
    with pytest.raises(EncodingError):
        certificate.Certificate(b'\x30\x03\x02\x01\x01')


def test_trailing_bytes(pki):
    with pytest.raises(EncodingError):
        certificate.Certificate(pki.leaf.der + b'\x00')


def test_is_issuer_of(pki):
    root, intermediate, leaf = (certificate.Certificate(d) for d in (pki.root.der, pki.intermediate.der,
                                                                     pki.leaf.der))

    assert certificate.is_issuer_of(intermediate, leaf)
    assert certificate.is_issuer_of(root, intermediate)
    assert not certificate.is_issuer_of(leaf, intermediate)
    assert not certificate.is_issuer_of(root, leaf)


def test_self_signed_does_not_issue_itself(pki):
    root = certificate.Certificate(pki.root.der)

    assert root.is_self_issued
    assert not certificate.is_issuer_of(root, root)


def test_repr_describes_subject(pki):
    leaf = certificate.Certificate(pki.leaf.der)

    assert 'commonName=Snakefoot Test Signer' in repr(leaf)
    assert '0080c0ffee' in repr(leaf)
