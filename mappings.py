from pyasn1_alt_modules import rfc4055

ATTRIBUTE_NAME_TO_OID_MAPPINGS = {
    'commonName': '2.5.4.3',
    'surname': '2.5.4.4',
    'serialNumber': '2.5.4.5',
    'countryName': '2.5.4.6',
    'localityName': '2.5.4.7',
    'stateOrProvinceName': '2.5.4.8',
    'streetAddress': '2.5.4.9',
    'organizationName': '2.5.4.10',
    'organizationalUnitName': '2.5.4.11',
    'title': '2.5.4.12',
    'description': '2.5.4.13',
    'businessCategory': '2.5.4.15',
    'postalCode': '2.5.4.17',
    'name': '2.5.4.41',
    'givenName': '2.5.4.42',
    'initials': '2.5.4.43',
    'generationQualifier': '2.5.4.44',
    'dnQualifier': '2.5.4.46',
    'pseudonym': '2.5.4.65',
    'organizationIdentifier': '2.5.4.97',
    'emailAddress': '1.2.840.113549.1.9.1',
    'unstructuredName': '1.2.840.113549.1.9.2',
    'userId': '0.9.2342.19200300.100.1.1',
    'domainComponent': '0.9.2342.19200300.100.1.25',
    'jurisdictionOfIncorporationLocalityName': '1.3.6.1.4.1.311.60.2.1.1',
    'jurisdictionOfIncorporationStateOrProvinceName': '1.3.6.1.4.1.311.60.2.1.2',
    'jurisdictionOfIncorporationCountryName': '1.3.6.1.4.1.311.60.2.1.3',
}


OID_TO_ATTRIBUTE_NAME_MAPPINGS = {
    v: k for k, v in ATTRIBUTE_NAME_TO_OID_MAPPINGS.items()
}


SHA256_WITH_RSA_ENCRYPTION = str(rfc4055.sha256WithRSAEncryption)

JWS_ALGORITHM = 'RS256'
