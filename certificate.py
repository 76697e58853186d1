import io
import logging
from typing import NamedTuple, Sequence

from cryptography.hazmat.primitives import hashes
from pyasn1.codec.der.decoder import decode
from pyasn1.codec.der.encoder import encode
from pyasn1.error import PyAsn1Error
from pyasn1.type import univ
from pyasn1_alt_modules import rfc5280, pem

import mappings
from errors import EncodingError, UnknownOidError


logger = logging.getLogger(__name__)


class IssuerAttribute(NamedTuple):
    name: str
    oid: str
    value: bytes
    value_tag: int


class Certificate:
    """A parsed X.509 certificate.

    Wraps the DER encoding together with its pyasn1 ``rfc5280.Certificate``
    decoding. Instances are not meant to be modified after construction.
    """

    def __init__(self, der: bytes):
        der = bytes(der)

        try:
            decoded, rest = decode(der, asn1Spec=rfc5280.Certificate())
        except PyAsn1Error as e:
            raise EncodingError(f'Could not parse certificate: {e}') from e

        if rest:
            raise EncodingError(f'Certificate is followed by {len(rest)} unexpected trailing bytes')

        self._der = der
        self._asn1 = decoded
        self._issuer_der = encode(decoded['tbsCertificate']['issuer'])
        self._subject_der = encode(decoded['tbsCertificate']['subject'])

    @property
    def der(self) -> bytes:
        return self._der

    @property
    def tbs(self) -> rfc5280.TBSCertificate:
        return self._asn1['tbsCertificate']

    @property
    def issuer_rdns(self) -> rfc5280.RDNSequence:
        return self.tbs['issuer']['rdnSequence']

    @property
    def subject_rdns(self) -> rfc5280.RDNSequence:
        return self.tbs['subject']['rdnSequence']

    @property
    def serial_number(self) -> int:
        return int(self.tbs['serialNumber'])

    @property
    def serial_number_hex(self) -> str:
        n = self.serial_number
        length = (n if n >= 0 else ~n).bit_length() // 8 + 1

        return n.to_bytes(length, 'big', signed=True).hex()

    @property
    def is_self_issued(self) -> bool:
        return self._issuer_der == self._subject_der

    def __eq__(self, other):
        return isinstance(other, Certificate) and self._der == other._der

    def __hash__(self):
        return hash(self._der)

    def __repr__(self):
        return f'Certificate(subject="{describe_name(self.subject_rdns)}", serial=0x{self.serial_number_hex})'


def load_certificate(data: bytes) -> Certificate:
    """Load a certificate given either as PEM text or as DER bytes."""
    if data.lstrip().startswith(b'-----BEGIN'):
        der = pem.readPemFromFile(io.StringIO(data.decode('ascii')))

        if not der:
            raise EncodingError('PEM input does not contain a certificate')

        return Certificate(der)

    return Certificate(data)


def decode_attribute_value(atv: rfc5280.AttributeTypeAndValue) -> univ.OctetString:
    """Decode the open-typed value of ``atv`` into its string type, keeping the tag it was encoded with."""
    try:
        value, rest = decode(atv['value'].asOctets())
    except PyAsn1Error as e:
        raise EncodingError(f'Could not decode value of attribute "{atv["type"]}": {e}') from e

    if rest or not isinstance(value, univ.OctetString):
        raise EncodingError(f'Value of attribute "{atv["type"]}" is not a string')

    return value


def describe_name(rdns: rfc5280.RDNSequence) -> str:
    parts = []

    for rdn in rdns:
        for atv in rdn:
            oid = str(atv['type'])
            label = mappings.OID_TO_ATTRIBUTE_NAME_MAPPINGS.get(oid, oid)

            try:
                text = str(decode_attribute_value(atv))
            except EncodingError:
                text = atv['value'].asOctets().hex()

            parts.append(f'{label}={text}')

    return ', '.join(parts)


def is_issuer_of(issuer: Certificate, subject: Certificate) -> bool:
    if issuer == subject:
        return False

    return subject._issuer_der == issuer._subject_der


def issuer_attributes(cert: Certificate) -> Sequence[IssuerAttribute]:
    attributes = []

    for rdn in cert.issuer_rdns:
        for atv in rdn:
            if not atv['value'].isValue or not atv['value'].asOctets():
                continue

            oid = str(atv['type'])
            name = mappings.OID_TO_ATTRIBUTE_NAME_MAPPINGS.get(oid)

            if name is None:
                raise UnknownOidError(f'Issuer attribute with unknown OID "{oid}" in {cert!r}')

            value = decode_attribute_value(atv)

            attributes.append(IssuerAttribute(name, oid, value.asOctets(), value.tagSet.baseTag.tagId))

    return attributes


def serial_number_bytes(cert: Certificate) -> bytes:
    return bytes.fromhex(cert.serial_number_hex)


def der_bytes(cert: Certificate) -> bytes:
    return cert.der


def sha256_thumbprint(cert: Certificate) -> str:
    h = hashes.Hash(hashes.SHA256())
    h.update(der_bytes(cert))

    return h.finalize().hex()
