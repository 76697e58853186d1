import datetime
import json
import logging
from typing import Any, Dict, Optional, Union

import header_builder
import pfx
import signing


logger = logging.getLogger(__name__)


EXAMPLE_PAYLOAD = {
    'refKey': '34a260e4-c98f-43b6-a451-f9805ae0e231',
    'itemType': 'tsvjBatch',
    'items': [
        {
            'refKey': '4265094b-4eea-4f03-8cd1-0c8e5f931f76',
            'itemType': 'tsvjCreateCertificate',
            'initialBalance': {
                'balance': 12,
                'source': 'royDataInsurer',
            },
            'certificateHolder': {
                'certificateHolderType': 'naturalPerson',
                'initials': 'JWS',
                'prefixes': '',
                'surname': 'JWS demo',
                'birthDate': '1990-01-01',
                'postalCode': '5511AA',
                'houseNumber': 9,
                'houseNumberAddition': '',
                'country': 'NL',
            },
            'object': {
                'entityType': 'motorVehicle',
                'licensePlate': '8KKT26',
            },
            'policy': {
                'contractNumber': 'p.jws.00001',
                'effectiveDate': '2024-01-01',
                'coverages': [
                    {
                        'entityType': 'thirdPartyLiability',
                        'coverageCode': '2001',
                    },
                ],
            },
        },
    ],
}


def serialize_payload(value: Any) -> bytes:
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


def sign_payload(pfx_bytes: bytes, password: Optional[Union[str, bytes]], payload: Any,
                 now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
    """Produce a JAdES Baseline-B signature over ``payload`` as a JWS General JSON Serialization.

    The private key extracted from the container is released when this function
    returns, whether signing succeeded or not.
    """
    extracted = pfx.extract(pfx_bytes, password)

    with extracted.private_key as private_key:
        header = header_builder.assemble(extracted.chain, extracted.signing_certificate, now)

        jws = signing.sign_general(serialize_payload(payload), private_key, header)

    logger.info('Signed payload with %r', extracted.signing_certificate)

    return jws


def render(jws: Dict[str, Any]) -> str:
    return json.dumps(jws, indent=2)
