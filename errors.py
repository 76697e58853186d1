class JadesError(ValueError):
    stage = 'jades'

    def __str__(self):
        return f'[{self.stage}] {super().__str__()}'


class InvalidPasswordError(JadesError):
    stage = 'pfx'


class MalformedContainerError(JadesError):
    stage = 'pfx'


class NoPrivateKeyError(JadesError):
    stage = 'pfx'


class KeyConversionError(JadesError):
    stage = 'pfx'


class UnknownOidError(JadesError):
    stage = 'certificate'


class EncodingError(JadesError):
    stage = 'der'


class HeaderError(JadesError):
    stage = 'header'
