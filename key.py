import logging
from abc import ABC

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk
from jose.backends.base import Key
from jose.exceptions import JOSEError

import mappings
from errors import KeyConversionError


logger = logging.getLogger(__name__)


class PrivateKey(ABC):
    @property
    def algorithm(self) -> str:
        raise NotImplementedError()

    @property
    def encoded(self) -> bytes:
        raise NotImplementedError()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def release(self):
        pass

    def to_jwk(self) -> Key:
        raise NotImplementedError()


class RsaPrivateKey(PrivateKey):
    """An RSA signing key held as PKCS#8 PEM text.

    The PEM buffer is zeroed by ``release``, which runs when the key is used as a
    context manager and the block exits, normally or through an exception.
    """

    def __init__(self, pkcs8_pem: bytes):
        self._pkcs8_pem = bytearray(pkcs8_pem)
        self._released = False

    def __repr__(self):
        state = 'released' if self._released else 'loaded'

        return f'RsaPrivateKey({state})'

    @property
    def algorithm(self) -> str:
        return mappings.JWS_ALGORITHM

    @property
    def released(self) -> bool:
        return self._released

    @property
    def encoded(self) -> bytes:
        self._check_not_released()

        return bytes(self._pkcs8_pem)

    def _check_not_released(self):
        if self._released:
            raise ValueError('Private key has already been released')

    def _load(self) -> rsa.RSAPrivateKey:
        try:
            loaded = serialization.load_pem_private_key(bytes(self._pkcs8_pem), password=None)
        except (ValueError, TypeError) as e:
            raise KeyConversionError(f'Could not import PKCS#8 private key: {e}') from e

        if not isinstance(loaded, rsa.RSAPrivateKey):
            raise KeyConversionError(f'Expected an RSA private key, got {type(loaded).__name__}')

        return loaded

    def release(self):
        for i in range(len(self._pkcs8_pem)):
            self._pkcs8_pem[i] = 0

        if not self._released:
            logger.debug('Private key material released')

        self._released = True

    def to_jwk(self) -> Key:
        try:
            return jwk.construct(self.encoded, self.algorithm)
        except JOSEError as e:
            raise KeyConversionError(f'Could not import PKCS#8 private key as a JWK: {e}') from e

    @staticmethod
    def from_cryptography(cryptography_obj) -> 'RsaPrivateKey':
        if not isinstance(cryptography_obj, rsa.RSAPrivateKey):
            raise KeyConversionError(
                f'Only RSA keys are supported for {mappings.JWS_ALGORITHM}, got {type(cryptography_obj).__name__}')

        try:
            pkcs8_pem = cryptography_obj.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption())
        except ValueError as e:
            raise KeyConversionError(f'Could not convert private key to PKCS#8: {e}') from e

        key = RsaPrivateKey(pkcs8_pem)

        try:
            key._load()
        except KeyConversionError:
            key.release()
            raise

        return key
