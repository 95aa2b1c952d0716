"""
Methods for reading and writing the fixed-width integers, CompactSize integers and length-prefixed byte strings of
the Bitcoin wire format.

Readers consume from a BytesIO stream; whatever is left in the stream after a read is the remainder.
"""
from io import BytesIO
from typing import Union, Optional, Literal

from .exceptions import ReadError, WriteError
from .formats import DATA

__all__ = ["SERIALIZED", "get_stream", "read_stream", "read_little_int", "read_big_int", "write_little_int",
           "read_compact_size", "write_compact_size", "read_length_prefixed", "write_length_prefixed"]

SERIALIZED = Union[bytes, BytesIO]
BYTEORDER = Literal['big', 'little']


def get_stream(byte_stream: SERIALIZED):
    """Convert bytes or BytesIO to BytesIO stream"""
    if isinstance(byte_stream, (bytes, bytearray)):
        return BytesIO(bytes(byte_stream))
    elif isinstance(byte_stream, BytesIO):
        return byte_stream
    else:
        raise TypeError(f"Expected bytes or BytesIO but received: {type(byte_stream)}")


def read_stream(stream: BytesIO, length: int, data_type: Optional[str] = None) -> bytes:
    """Read exact number of bytes from stream with error checking"""
    data = stream.read(length)

    if len(data) != length:
        if data_type:
            raise ReadError(f"Error reading stream. Insufficient data. Data type: {data_type}")
        raise ReadError("Error reading stream. Insufficient data.")

    return data


def _read_int(stream: BytesIO, length: int, byteorder: BYTEORDER, data_type: Optional[str] = None,
              signed: bool = False) -> int:
    data = read_stream(stream, length, data_type)
    return int.from_bytes(data, byteorder, signed=signed)


def read_little_int(stream: BytesIO, length: int, data_type: Optional[str] = None, signed: bool = False) -> int:
    """Read little-endian integer from stream"""
    return _read_int(stream, length, "little", data_type, signed)


def read_big_int(stream: BytesIO, length: int, data_type: Optional[str] = None, signed: bool = False) -> int:
    """Read big-endian integer from stream"""
    return _read_int(stream, length, "big", data_type, signed)


def write_little_int(num: int, length: int, signed: bool = False) -> bytes:
    """Encode an integer as a fixed-width little-endian value"""
    try:
        return num.to_bytes(length, "little", signed=signed)
    except OverflowError as e:
        raise WriteError(f"Integer {num} does not fit in {length} bytes") from e


# --- COMPACT SIZE --- #

def read_compact_size(byte_stream: SERIALIZED) -> int:
    stream = get_stream(byte_stream)

    prefix = read_little_int(stream, 1, "Compact Size Prefix")

    # One byte compact size number
    if prefix < 0xfd:
        return prefix

    match prefix:
        case 0xfd:
            return read_little_int(stream, 2, "Compact Size: 0xfd")
        case 0xfe:
            return read_little_int(stream, 4, "Compact Size: 0xfe")
        case _:
            return read_little_int(stream, 8, "Compact Size: 0xff")


def write_compact_size(num: int) -> bytes:
    """
    Given an integer we return its CompactSize encoding, always using the smallest prefix class
    """
    if num < 0 or num > DATA.MAX_COMPACTSIZE:
        raise WriteError("Given number out of bounds for CompactSize encoding")

    if num < 0xfd:  # One byte
        return num.to_bytes(1, "little")
    elif num <= 0xffff:  # Two bytes
        return b'\xfd' + num.to_bytes(2, "little")
    elif num <= 0xffffffff:  # Four bytes
        return b'\xfe' + num.to_bytes(4, "little")
    else:  # Eight bytes
        return b'\xff' + num.to_bytes(8, "little")


# --- LENGTH PREFIXED DATA --- #

def read_length_prefixed(byte_stream: SERIALIZED, data_type: Optional[str] = None) -> bytes:
    """
    Read a CompactSize length followed by that many bytes
    """
    stream = get_stream(byte_stream)
    length = read_compact_size(stream)
    return read_stream(stream, length, data_type)


def write_length_prefixed(data: bytes) -> bytes:
    return write_compact_size(len(data)) + data
