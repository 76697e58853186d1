from typing import NamedTuple

import pytest

import cert_builder
import certificate


class Pki(NamedTuple):
    root: cert_builder.IssuedCertificate
    intermediate: cert_builder.IssuedCertificate
    leaf: cert_builder.IssuedCertificate

    @property
    def chain_ders(self):
        return [self.leaf.der, self.intermediate.der, self.root.der]

    @property
    def chain(self):
        return [certificate.Certificate(d) for d in self.chain_ders]


@pytest.fixture(scope='session')
def pki():
    root = cert_builder.build_root(cert_builder.generate_rsa_key(), serial_number=1)
    intermediate = cert_builder.build_issued(cert_builder.generate_rsa_key(), root, 'Snakefoot Test Issuing CA',
                                             serial_number=0x1000)
    leaf = cert_builder.build_issued(cert_builder.generate_rsa_key(), intermediate, 'Snakefoot Test Signer',
                                     serial_number=0x80C0FFEE)

    return Pki(root, intermediate, leaf)


@pytest.fixture(scope='session')
def pfx_bytes(pki):
    return cert_builder.build_pfx(pki.leaf.private_key, pki.chain_ders)
