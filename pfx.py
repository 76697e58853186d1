import logging
from typing import NamedTuple, Optional, Sequence, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import Encoding, pkcs12
from pyasn1.codec.ber.decoder import decode
from pyasn1.error import PyAsn1Error
from pyasn1_alt_modules import rfc5652, rfc7292

import certificate
import key
from errors import EncodingError, InvalidPasswordError, MalformedContainerError, NoPrivateKeyError


logger = logging.getLogger(__name__)


_PFX_VERSION = 3

_AUTH_SAFE_CONTENT_TYPES = (rfc5652.id_data, rfc5652.id_signedData)


class ExtractedPfx(NamedTuple):
    chain: Tuple[certificate.Certificate, ...]
    signing_certificate: certificate.Certificate
    private_key: key.RsaPrivateKey


def _check_container(pfx_bytes: bytes):
    if not pfx_bytes:
        raise MalformedContainerError('PKCS#12 container is empty')

    try:
        pfx, rest = decode(pfx_bytes, asn1Spec=rfc7292.PFX())
    except PyAsn1Error as e:
        raise MalformedContainerError(f'Could not parse PKCS#12 container: {e}') from e

    if rest:
        raise MalformedContainerError(f'PKCS#12 container is followed by {len(rest)} unexpected trailing bytes')

    if int(pfx['version']) != _PFX_VERSION:
        raise MalformedContainerError(f'Unsupported PKCS#12 version {int(pfx["version"])}')

    content_type = pfx['authSafe']['contentType']

    if not content_type.isValue or content_type not in _AUTH_SAFE_CONTENT_TYPES:
        raise MalformedContainerError('PKCS#12 container does not hold an authenticated safe')


def _load(pfx_bytes: bytes, password: Optional[Union[str, bytes]]) -> pkcs12.PKCS12KeyAndCertificates:
    if isinstance(password, str):
        password = password.encode('utf-8')

    try:
        return pkcs12.load_pkcs12(pfx_bytes, password)
    except UnsupportedAlgorithm as e:
        raise MalformedContainerError(f'PKCS#12 container uses an unsupported algorithm: {e}') from e
    except ValueError as e:
        raise InvalidPasswordError(f'Could not decrypt PKCS#12 container, check the password: {e}') from e


def _collect_certificates(loaded: pkcs12.PKCS12KeyAndCertificates) -> Sequence[certificate.Certificate]:
    bags = []

    if loaded.cert is not None:
        bags.append(loaded.cert)

    bags.extend(loaded.additional_certs)

    certs = []

    for bag in bags:
        try:
            cert = certificate.Certificate(bag.certificate.public_bytes(Encoding.DER))
        except EncodingError as e:
            raise MalformedContainerError(f'PKCS#12 container holds an unreadable certificate: {e}') from e

        if cert not in certs:
            certs.append(cert)

    return certs


def _issues_any(cert: certificate.Certificate, others: Sequence[certificate.Certificate]) -> bool:
    return any(certificate.is_issuer_of(cert, o) for o in others)


def order_chain(certs: Sequence[certificate.Certificate]) -> Tuple[certificate.Certificate, ...]:
    """Order certificates child first, root last.

    This is a topological sort over the issued-by relation. At each step the
    first remaining certificate (in encounter order) that issues none of the
    other remaining certificates is placed next. Certificates with no issuance
    relation between them keep their encounter order. If every remaining
    certificate issues another one, the set contains a cycle and the first
    remaining certificate is placed next.
    """
    if not certs:
        raise MalformedContainerError('PKCS#12 container holds no certificates')

    remaining = list(certs)
    chain = []

    while remaining:
        next_cert = next((c for c in remaining if not _issues_any(c, remaining)), None)

        if next_cert is None:
            logger.warning('Certificate set contains an issuance cycle, keeping encounter order for the rest')

            next_cert = remaining[0]

        chain.append(next_cert)
        remaining.remove(next_cert)

    return tuple(chain)


def find_leaf(chain: Sequence[certificate.Certificate]) -> certificate.Certificate:
    leaf = next((c for c in chain if not _issues_any(c, chain)), None)

    if leaf is None:
        raise MalformedContainerError('No certificate in the chain qualifies as the signing certificate')

    return leaf


def extract(pfx_bytes: bytes, password: Optional[Union[str, bytes]]) -> ExtractedPfx:
    pfx_bytes = bytes(pfx_bytes)

    _check_container(pfx_bytes)

    loaded = _load(pfx_bytes, password)

    chain = order_chain(_collect_certificates(loaded))

    for idx, cert in enumerate(chain):
        logger.debug('Chain element %d: %r', idx, cert)

    signing_certificate = find_leaf(chain)

    logger.info('Extracted %d certificate(s), signing certificate %r', len(chain), signing_certificate)

    if loaded.key is None:
        raise NoPrivateKeyError('PKCS#12 container does not hold a private key')

    private_key = key.RsaPrivateKey.from_cryptography(loaded.key)

    return ExtractedPfx(chain, signing_certificate, private_key)
