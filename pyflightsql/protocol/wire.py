# Copyright 2014, 2015 SAP SE
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import io
import struct
###
from pyflightsql.exceptions import MalformedError
from pyflightsql.protocol.constants import wire_types

UINT64_MASK = (1 << 64) - 1

fixed32_struct = struct.Struct('<I')
fixed64_struct = struct.Struct('<Q')

FIXED_SIZES = {
    wire_types.I32: fixed32_struct.size,
    wire_types.I64: fixed64_struct.size,
}


def pack_varint(value):
    """Pack an integer as base 128 varint. Negative values are packed as 64 bit two's complement."""
    value &= UINT64_MASK
    result = bytearray()
    while True:
        bits = value & 0x7F
        value >>= 7
        if value:
            result.append(bits | 0x80)
        else:
            result.append(bits)
            return bytes(result)


def unpack_varint(payload):
    """Read a varint from payload
    :param payload: BytesIO instance positioned at the first byte of the varint
    :returns: unsigned integer value
    """
    result = 0
    for shift in range(0, 7 * wire_types.MAX_VARINT_SIZE, 7):
        byte = payload.read(1)
        if not byte:
            raise MalformedError("Truncated varint")
        byte = ord(byte)
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result & UINT64_MASK
    raise MalformedError("Varint exceeds %d bytes" % wire_types.MAX_VARINT_SIZE)


def to_signed64(value):
    if value & (1 << 63):
        return value - (1 << 64)
    return value


def pack_tag(number, wire_type):
    return pack_varint(number << 3 | wire_type)


def pack_length_delimited(number, data):
    return pack_tag(number, wire_types.LEN) + pack_varint(len(data)) + data


def pack_varint_field(number, value):
    return pack_tag(number, wire_types.VARINT) + pack_varint(value)


def iter_fields(data):
    """Iterate over all fields of a serialized message
    :param data: binary message payload
    :returns: a generator yielding (field number, wire type, value) tuples.
              value is an int for varints and bytes for all other wire types.
    """
    payload = io.BytesIO(data)
    end = len(data)

    while payload.tell() < end:
        key = unpack_varint(payload)
        number, wire_type = key >> 3, key & 0x07
        if number == 0:
            raise MalformedError("Invalid field number 0")

        if wire_type == wire_types.VARINT:
            value = unpack_varint(payload)
        elif wire_type == wire_types.LEN:
            length = unpack_varint(payload)
            value = payload.read(length)
            if len(value) != length:
                raise MalformedError("Truncated field %d, expected %d bytes got %d" % (number, length, len(value)))
        elif wire_type in FIXED_SIZES:
            value = payload.read(FIXED_SIZES[wire_type])
            if len(value) != FIXED_SIZES[wire_type]:
                raise MalformedError("Truncated fixed size field %d" % number)
        else:
            raise MalformedError("Unsupported wire type %d for field %d" % (wire_type, number))
        yield number, wire_type, value


def iter_packed_varints(data):
    payload = io.BytesIO(data)
    while payload.tell() < len(data):
        yield unpack_varint(payload)


def to_bytes(buf):
    """Return the content of a pyarrow Buffer (or any bytes-like object) as bytes"""
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    return buf.to_pybytes()
