# Copyright 2014, 2015 SAP SE.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http: //www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND,
# either express or implied. See the License for the specific
# language governing permissions and limitations under the License.

import pytest
from io import BytesIO
###
from pyflightsql.protocol import wire
from pyflightsql.protocol.constants import wire_types
from pyflightsql.exceptions import MalformedError


@pytest.mark.parametrize("value,packed", [
    (0, b"\x00"),
    (1, b"\x01"),
    (127, b"\x7f"),
    (128, b"\x80\x01"),
    (300, b"\xac\x02"),
    (-1, b"\xff\xff\xff\xff\xff\xff\xff\xff\xff\x01"),
])
def test_pack_varint(value, packed):
    assert wire.pack_varint(value) == packed


def test_unpack_varint():
    payload = BytesIO(b"\xac\x02\x05")
    assert wire.unpack_varint(payload) == 300
    assert wire.unpack_varint(payload) == 5


def test_unpack_negative_varint_as_signed():
    payload = BytesIO(wire.pack_varint(-100))
    assert wire.to_signed64(wire.unpack_varint(payload)) == -100


def test_unpack_truncated_varint_raises():
    with pytest.raises(MalformedError):
        wire.unpack_varint(BytesIO(b"\x80\x80"))


def test_unpack_overlong_varint_raises():
    with pytest.raises(MalformedError):
        wire.unpack_varint(BytesIO(b"\xff" * 11))


def test_pack_tag():
    assert wire.pack_tag(1, wire_types.LEN) == b"\x0a"
    assert wire.pack_tag(5, wire_types.VARINT) == b"\x28"
    assert wire.pack_tag(16, wire_types.VARINT) == b"\x80\x01"


def test_pack_length_delimited():
    assert wire.pack_length_delimited(2, b"abc") == b"\x12\x03abc"


def test_iter_fields():
    data = b"\x0a\x03abc" + b"\x10\x96\x01" + b"\x1d\x01\x00\x00\x00" + b"\x21" + b"\x00" * 8
    fields = list(wire.iter_fields(data))
    assert fields == [
        (1, wire_types.LEN, b"abc"),
        (2, wire_types.VARINT, 150),
        (3, wire_types.I32, b"\x01\x00\x00\x00"),
        (4, wire_types.I64, b"\x00" * 8),
    ]


def test_iter_fields_of_empty_message():
    assert list(wire.iter_fields(b"")) == []


@pytest.mark.parametrize("data", [
    b"\x0a\x05abc",        # length exceeds data
    b"\x10",               # missing varint value
    b"\x1d\x01\x00",       # truncated fixed32
    b"\x02\x00",           # field number 0
    b"\x0b",               # start group wire type
])
def test_iter_fields_with_invalid_data_raises(data):
    with pytest.raises(MalformedError):
        list(wire.iter_fields(data))


def test_iter_packed_varints():
    assert list(wire.iter_packed_varints(b"\x01\xac\x02\x00")) == [1, 300, 0]


def test_to_bytes():
    class Buffer(object):
        def to_pybytes(self):
            return b"buffer"

    assert wire.to_bytes(b"abc") == b"abc"
    assert wire.to_bytes(bytearray(b"abc")) == b"abc"
    assert wire.to_bytes(Buffer()) == b"buffer"
