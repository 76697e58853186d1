import base64
import json
from typing import Any, Dict

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jws
from jose.exceptions import JWSError

import certificate
import header_builder
import mappings
import signing


def decode_protected_header(encoded_header: str) -> Dict[str, Any]:
    try:
        return json.loads(signing.base64url_decode(encoded_header))
    except (ValueError, UnicodeError) as e:
        raise ValueError(f'Could not decode protected header: {e}') from e


def _verify_signature_entry(encoded_payload: str, entry: Dict[str, Any]) -> bool:
    header = decode_protected_header(entry['protected'])

    if header.get('alg') != mappings.JWS_ALGORITHM:
        raise ValueError(f'Unsupported signature algorithm "{header.get("alg")}"')

    header_builder.check_critical(header)

    if not header.get('x5c'):
        raise ValueError('Protected header does not carry a certificate chain')

    leaf_der = base64.b64decode(header['x5c'][0])
    leaf = certificate.Certificate(leaf_der)

    if header.get('x5t#S256') != header_builder.encode_thumbprint(certificate.sha256_thumbprint(leaf)):
        raise ValueError('Certificate thumbprint does not match the first x5c element')

    public_key = x509.load_der_x509_certificate(leaf_der).public_key()

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ValueError('Signing certificate does not hold an RSA public key')

    public_pem = public_key.public_bytes(serialization.Encoding.PEM,
                                         serialization.PublicFormat.SubjectPublicKeyInfo)

    token = '.'.join((entry['protected'], encoded_payload, entry['signature']))

    try:
        jws.verify(token, public_pem, algorithms=[mappings.JWS_ALGORITHM])

        return True
    except JWSError:
        return False


def verify_general(jws_object: Dict[str, Any]) -> bool:
    signatures = jws_object.get('signatures')

    if not signatures:
        raise ValueError('JWS object does not contain any signatures')

    return all(_verify_signature_entry(jws_object['payload'], entry) for entry in signatures)
