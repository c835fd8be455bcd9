class TransparentizerError(Exception):
    """Base class for every failure raised by the transparentizer."""


class UnsupportedFormatError(TransparentizerError):
    """The format tag is UNSUPPORTED (or has no codec on this path)."""


class UnsupportedEncodeFormatError(UnsupportedFormatError):
    """The format has a decoder but no data-URI encoder."""


class DecodeError(TransparentizerError):
    """The codec rejected the byte stream."""


class EncodeError(TransparentizerError):
    """The codec failed to serialise the image."""


class Base64DecodeError(TransparentizerError):
    """The data-URI payload is not valid base64."""


class AlreadyTransparentError(TransparentizerError):
    """The image already carries non-opaque pixels."""


class FileSystemError(TransparentizerError):
    """Missing input, permission denied or any other path error."""
