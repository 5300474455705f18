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

import logging
###
from pyflightsql.exceptions import MalformedError
from pyflightsql.protocol import wire
from pyflightsql.protocol.commands import COMMAND_MAPPING
from pyflightsql.protocol.constants import wire_types
from pyflightsql.lib.tracing import trace

logger = logging.getLogger('pyflightsql')
debug = logger.debug

# Field numbers of google.protobuf.Any
TYPE_URL_FIELD = 1
VALUE_FIELD = 2


class Envelope(object):
    """
    Type tagged wrapper around a serialized command, binary compatible with google.protobuf.Any.
    It is the payload of every descriptor command, ticket and action body of the protocol.
    """
    __tracing_attrs__ = ['type_url', 'payload']

    def __init__(self, type_url, payload=b''):
        self.type_url = type_url
        self.payload = payload

    def __repr__(self):
        return '<Envelope %s (%d bytes)>' % (self.type_url, len(self.payload))

    @classmethod
    def wrap(cls, command):
        """Return a new envelope containing the serialized command"""
        return cls(command.type_url, command.pack_data())

    def pack(self):
        """Serialize envelope into bytes"""
        data = b''
        if self.type_url:
            data += wire.pack_length_delimited(TYPE_URL_FIELD, self.type_url.encode('utf-8'))
        if self.payload:
            data += wire.pack_length_delimited(VALUE_FIELD, self.payload)
        trace(self)
        return data

    @classmethod
    def unpack(cls, data):
        """Parse serialized envelope
        :param data: bytes or pyarrow Buffer
        :returns: Envelope instance
        """
        type_url, payload = '', b''
        for number, wire_type, value in wire.iter_fields(wire.to_bytes(data)):
            if number not in (TYPE_URL_FIELD, VALUE_FIELD):
                continue
            if wire_type != wire_types.LEN:
                raise MalformedError("Envelope field %d has wire type %d" % (number, wire_type))
            if number == TYPE_URL_FIELD:
                try:
                    type_url = value.decode('utf-8')
                except UnicodeDecodeError:
                    raise MalformedError("Envelope type tag is not valid UTF-8")
            else:
                payload = value

        if not type_url:
            raise MalformedError("Envelope does not carry a type tag")
        envelope = cls(type_url, payload)
        trace(envelope)
        return envelope

    @property
    def command_class(self):
        """Return the registered command class of the type tag or None"""
        return COMMAND_MAPPING.get(self.type_url)

    def is_(self, command_class):
        return self.type_url == command_class.type_url

    def unwrap(self, expected=None):
        """Parse the payload into its command
        :param expected: optional command class the envelope has to contain
        :returns: command instance
        """
        if expected is not None:
            if not self.is_(expected):
                raise MalformedError("Expected %s but envelope contains %s" % (expected.__name__, self.type_url))
            command_class = expected
        else:
            command_class = self.command_class
            if command_class is None:
                raise MalformedError("Unknown type tag %s" % self.type_url)

        command = command_class.unpack_data(self.payload)
        trace(command)
        return command


def encode(command):
    """Wrap command into an envelope and serialize it"""
    return Envelope.wrap(command).pack()


def decode(data, expected=None):
    """Deserialize an envelope and the command within it"""
    return Envelope.unpack(data).unwrap(expected)
