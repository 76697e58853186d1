import base64
import datetime
import logging
from typing import Any, Dict, Optional, Sequence

import certificate
import issuer_serial
import mappings
from certificate import Certificate
from errors import HeaderError


logger = logging.getLogger(__name__)


CONTENT_TYPE = 'json'
SIGNATURE_TYPE = 'jose+json'
SIGNING_TIME_HEADER = 'sigT'

# RFC 7515 section 4.1 and RFC 7797
REGISTERED_HEADER_NAMES = frozenset({
    'alg', 'jku', 'jwk', 'kid', 'x5u', 'x5c', 'x5t', 'x5t#S256', 'typ', 'cty', 'crit', 'b64',
})


def format_signing_time(now: datetime.datetime) -> str:
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.timezone.utc)

    return now.astimezone(datetime.timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def encode_thumbprint(hex_digest: str) -> str:
    return base64.urlsafe_b64encode(bytes.fromhex(hex_digest)).rstrip(b'=').decode('ascii')


def check_critical(header: Dict[str, Any]):
    crit = header.get('crit')

    if crit is None:
        return

    if not isinstance(crit, list) or not crit:
        raise HeaderError('"crit" must be a non-empty list')

    for name in crit:
        if name in REGISTERED_HEADER_NAMES:
            raise HeaderError(f'"{name}" is a registered header name and cannot be listed in "crit"')

        if name not in header:
            raise HeaderError(f'"{name}" is listed in "crit" but is missing from the header')


def assemble(chain: Sequence[Certificate], signing_cert: Certificate,
             now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
    if now is None:
        now = datetime.datetime.now(tz=datetime.timezone.utc)

    kid = issuer_serial.encode_base64(issuer_serial.build_issuer_serial(signing_cert))

    header = {
        'alg': mappings.JWS_ALGORITHM,
        'cty': CONTENT_TYPE,
        'typ': SIGNATURE_TYPE,
        'kid': kid,
        'x5t#S256': encode_thumbprint(certificate.sha256_thumbprint(signing_cert)),
        'x5c': [base64.b64encode(certificate.der_bytes(c)).decode('ascii') for c in chain],
        'sigT': format_signing_time(now),
        'crit': [SIGNING_TIME_HEADER],
    }

    check_critical(header)

    logger.debug('Assembled protected header with kid %s and sigT %s', header['kid'], header['sigT'])

    return header
