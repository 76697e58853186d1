import base64
import re
from typing import NamedTuple, Sequence, Tuple, Union

from pyasn1.codec.ber.encoder import AbstractItemEncoder, ObjectIdentifierEncoder
from pyasn1.codec.der.encoder import encode
from pyasn1.error import PyAsn1Error
from pyasn1.type import tag, univ

from errors import EncodingError


CLASS_UNIVERSAL = tag.tagClassUniversal
CLASS_APPLICATION = tag.tagClassApplication
CLASS_CONTEXT_SPECIFIC = tag.tagClassContext
CLASS_PRIVATE = tag.tagClassPrivate

TAG_INTEGER = univ.Integer.tagSet.baseTag.tagId
TAG_OCTET_STRING = univ.OctetString.tagSet.baseTag.tagId
TAG_OID = univ.ObjectIdentifier.tagSet.baseTag.tagId
TAG_SEQUENCE = univ.Sequence.tagSet.baseTag.tagId
TAG_SET = univ.Set.tagSet.baseTag.tagId

# pyasn1 accepts empty and zero-padded arcs when parsing dotted notation
_OID_PATTERN = re.compile(r'^(0|[1-9]\d*)(\.(0|[1-9]\d*))+$')

_LENGTH_ENCODER = AbstractItemEncoder()
_OID_ENCODER = ObjectIdentifierEncoder()


class Asn1Node(NamedTuple):
    tag_class: int
    tag: int
    constructed: bool
    content: Union[bytes, Tuple['Asn1Node', ...]]


def create(tag_class: int, tag_number: int, constructed: bool,
           content: Union[bytes, Sequence[Asn1Node]]) -> Asn1Node:
    if tag_class not in (CLASS_UNIVERSAL, CLASS_APPLICATION, CLASS_CONTEXT_SPECIFIC, CLASS_PRIVATE):
        raise EncodingError(f'Invalid tag class: {tag_class:#x}')

    if tag_number < 0:
        raise EncodingError(f'Invalid tag number: {tag_number}')

    if isinstance(content, (bytes, bytearray)):
        content = bytes(content)
    else:
        content = tuple(content)

        if not constructed:
            raise EncodingError('Child nodes require a constructed encoding')

    return Asn1Node(tag_class, tag_number, constructed, content)


def encode_oid(dotted: str) -> bytes:
    """Return the content octets of an OBJECT IDENTIFIER given in dotted form."""
    if not isinstance(dotted, str) or not _OID_PATTERN.match(dotted):
        raise EncodingError(f'Malformed OID: "{dotted}"')

    try:
        octets, _, _ = _OID_ENCODER.encodeValue(univ.ObjectIdentifier(dotted), None, None)
    except PyAsn1Error as e:
        raise EncodingError(f'Malformed OID: "{dotted}" ({e})') from e

    return bytes(octets)


def encode_length(length: int) -> bytes:
    try:
        return bytes(_LENGTH_ENCODER.encodeLength(length, True))
    except PyAsn1Error as e:
        raise EncodingError(f'Content length {length} does not fit in a DER length field') from e


def _tag_set(node: Asn1Node) -> tag.TagSet:
    tag_format = tag.tagFormatConstructed if node.constructed else tag.tagFormatSimple

    return tag.initTagSet(tag.Tag(node.tag_class, tag_format, node.tag))


def to_asn1(node: Asn1Node):
    """Map ``node`` onto a pyasn1 value carrying the node's own tag.

    Primitive content becomes an ``OctetString`` re-tagged with the node's tag.
    Children become ``Any`` components of a ``SetOf`` for universal SETs, so
    that the DER encoder sorts them, and of a ``SequenceOf`` otherwise.
    """
    tag_set = _tag_set(node)

    if isinstance(node.content, bytes):
        return univ.OctetString(node.content, tagSet=tag_set)

    if node.tag_class == CLASS_UNIVERSAL and node.tag == TAG_SET:
        value = univ.SetOf(componentType=univ.Any(), tagSet=tag_set)
    else:
        value = univ.SequenceOf(componentType=univ.Any(), tagSet=tag_set)

    for child in node.content:
        value.append(univ.Any(encode_der(child)))

    return value


def encode_der(node: Asn1Node) -> bytes:
    try:
        return encode(to_asn1(node))
    except PyAsn1Error as e:
        raise EncodingError(f'Could not encode ASN.1 node [{node.tag_class:#x} {node.tag}]: {e}') from e


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')
