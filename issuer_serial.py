"""RFC 5035 ``IssuerSerial`` construction.

::

    IssuerSerial ::= SEQUENCE {
        issuer        GeneralNames,
        serialNumber  CertificateSerialNumber }

``GeneralNames`` holds a single ``directoryName`` (context tag [4]) carrying the
certificate's issuer name.
"""
import der_builder
import mappings
from certificate import Certificate, issuer_attributes, serial_number_bytes
from der_builder import Asn1Node


DIRECTORY_NAME_TAG = 4


def build_issuer(cert: Certificate) -> Asn1Node:
    rdns = []

    for attribute in issuer_attributes(cert):
        oid = mappings.ATTRIBUTE_NAME_TO_OID_MAPPINGS[attribute.name]

        atv = der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_SEQUENCE, True, [
            der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_OID, False, der_builder.encode_oid(oid)),
            der_builder.create(der_builder.CLASS_UNIVERSAL, attribute.value_tag, False, attribute.value),
        ])

        rdns.append(der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_SET, True, [atv]))

    return der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_SEQUENCE, True, rdns)


def build_serial_number(cert: Certificate) -> Asn1Node:
    return der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_INTEGER, False, serial_number_bytes(cert))


def build_issuer_serial(cert: Certificate) -> Asn1Node:
    directory_name = der_builder.create(der_builder.CLASS_CONTEXT_SPECIFIC, DIRECTORY_NAME_TAG, True,
                                        [build_issuer(cert)])

    general_names = der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_SEQUENCE, True,
                                       [directory_name])

    return der_builder.create(der_builder.CLASS_UNIVERSAL, der_builder.TAG_SEQUENCE, True,
                              [general_names, build_serial_number(cert)])


def encode_base64(node: Asn1Node) -> str:
    return der_builder.encode_base64(der_builder.encode_der(node))
