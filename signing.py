from typing import Any, Dict

from jose import jws
from jose.utils import base64url_decode as _base64url_decode, base64url_encode as _base64url_encode

import header_builder
import key


def base64url_encode(data: bytes) -> str:
    return _base64url_encode(data).decode('ascii')


def base64url_decode(value: str) -> bytes:
    return _base64url_decode(value.encode('ascii'))


def sign_general(payload: bytes, private_key: key.PrivateKey, header: Dict[str, Any]) -> Dict[str, Any]:
    """Sign ``payload`` and return a JWS General JSON Serialization object.

    python-jose produces the compact serialization; its three segments are
    rearranged into the single-signature General form.
    """
    if header.get('alg') != private_key.algorithm:
        raise ValueError(f'Header algorithm "{header.get("alg")}" and private key algorithm '
                         f'"{private_key.algorithm}" mismatch')

    header_builder.check_critical(header)

    token = jws.sign(payload, private_key.to_jwk(), headers=header, algorithm=private_key.algorithm)

    protected, encoded_payload, signature = token.split('.')

    return {
        'payload': encoded_payload,
        'signatures': [
            {
                'protected': protected,
                'signature': signature,
            }
        ],
    }
