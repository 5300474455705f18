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

import collections
import logging
from weakref import WeakValueDictionary
###
from pyflightsql.exceptions import InterfaceError, MalformedError
from pyflightsql.protocol import constants, wire
from pyflightsql.protocol.constants import wire_types

logger = logging.getLogger('pyflightsql')
debug = logger.debug

COMMAND_MAPPING = WeakValueDictionary()

CommandField = collections.namedtuple('CommandField', 'number name kind label')

# Field labels
IMPLICIT = 'implicit'
OPTIONAL = 'optional'
REPEATED = 'repeated'

# Field kinds and the wire type used for them
FIELD_WIRE_TYPES = {
    'string': wire_types.LEN,
    'bytes': wire_types.LEN,
    'bool': wire_types.VARINT,
    'int64': wire_types.VARINT,
    'uint32': wire_types.VARINT,
}
PACKED_KINDS = ('bool', 'int64', 'uint32')

DEFAULTS = {
    'string': '',
    'bytes': b'',
    'bool': False,
    'int64': 0,
    'uint32': 0,
}


def _pack_scalar(field, value):
    if field.kind == 'string':
        return wire.pack_length_delimited(field.number, value.encode('utf-8'))
    elif field.kind == 'bytes':
        return wire.pack_length_delimited(field.number, bytes(value))
    return wire.pack_varint_field(field.number, int(value))


def _convert_varint(field, value):
    if field.kind == 'bool':
        return bool(value)
    elif field.kind == 'int64':
        return wire.to_signed64(value)
    if value > 0xFFFFFFFF:
        raise MalformedError("Value %d of field %r exceeds uint32" % (value, field.name))
    return value


def _convert_length_delimited(field, value):
    if field.kind == 'string':
        try:
            return value.decode('utf-8')
        except UnicodeDecodeError:
            raise MalformedError("Field %r does not contain valid UTF-8" % field.name)
    return value


class CommandMeta(type):
    """
    Meta class for command classes which also adds them into COMMAND_MAPPING.
    """
    def __new__(mcs, name, bases, attrs):
        command_class = super(CommandMeta, mcs).__new__(mcs, name, bases, attrs)
        if command_class.type_name:
            type_url = constants.TYPE_URL_PREFIX + command_class.type_name
            if type_url in COMMAND_MAPPING:
                raise InterfaceError("Type tag %s is already registered by %s" %
                                     (type_url, COMMAND_MAPPING[type_url].__name__))
            command_class.type_url = type_url
            # Register new command class in registry dictionary for later lookup:
            COMMAND_MAPPING[type_url] = command_class
        command_class.fields_by_number = {field.number: field for field in command_class.fields}
        return command_class


class Command(metaclass=CommandMeta):
    """
    Base class of all typed protocol messages.
    Subclasses declare a type_name and the ordered tuple of their fields.
    """
    type_name = None
    type_url = None
    fields = ()

    def __init__(self, *args, **kwargs):
        if len(args) > len(self.fields):
            raise TypeError("%s takes at most %d arguments (%d given)" %
                            (self.__class__.__name__, len(self.fields), len(args)))
        values = dict(zip((field.name for field in self.fields), args))
        for key, value in kwargs.items():
            if key in values:
                raise TypeError("%s got multiple values for field %r" % (self.__class__.__name__, key))
            values[key] = value

        for field in self.fields:
            value = values.pop(field.name, None)
            if field.label == REPEATED:
                value = [self._coerce(field, v) for v in value] if value else []
            elif value is None:
                if field.label == IMPLICIT:
                    value = DEFAULTS[field.kind]
            else:
                value = self._coerce(field, value)
            setattr(self, field.name, value)

        if values:
            raise TypeError("%s got unexpected fields %s" % (self.__class__.__name__, ', '.join(sorted(values))))

    @staticmethod
    def _coerce(field, value):
        if field.kind == 'bytes' and isinstance(value, str):
            return value.encode('utf-8')
        return value

    @property
    def __tracing_attrs__(self):
        return [field.name for field in self.fields]

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, f.name) == getattr(other, f.name) for f in self.fields)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        values = ', '.join('%s=%r' % (f.name, getattr(self, f.name)) for f in self.fields)
        return '<%s %s>' % (self.__class__.__name__, values) if values else '<%s>' % self.__class__.__name__

    def pack_data(self):
        """Serialize all fields of the command in field number order"""
        payload = b''
        for field in self.fields:
            value = getattr(self, field.name)
            if field.label == REPEATED:
                if not value:
                    continue
                if field.kind in PACKED_KINDS:
                    packed = b''.join(wire.pack_varint(int(v)) for v in value)
                    payload += wire.pack_length_delimited(field.number, packed)
                else:
                    payload += b''.join(_pack_scalar(field, v) for v in value)
            elif field.label == OPTIONAL:
                if value is not None:
                    payload += _pack_scalar(field, value)
            elif value != DEFAULTS[field.kind]:
                payload += _pack_scalar(field, value)
        return payload

    @classmethod
    def unpack_data(cls, payload):
        """Reconstruct a command from its serialized fields. Unknown fields are skipped."""
        values = {}
        for number, wire_type, value in wire.iter_fields(payload):
            field = cls.fields_by_number.get(number)
            if field is None:
                debug('%s: skipping unknown field %d', cls.__name__, number)
                continue

            expected_wire_type = FIELD_WIRE_TYPES[field.kind]
            if field.label == REPEATED and field.kind in PACKED_KINDS and wire_type == wire_types.LEN:
                items = [_convert_varint(field, v) for v in wire.iter_packed_varints(value)]
                values.setdefault(field.name, []).extend(items)
                continue
            if wire_type != expected_wire_type:
                raise MalformedError("Field %r of %s has wire type %d, expected %d" %
                                     (field.name, cls.__name__, wire_type, expected_wire_type))

            if wire_type == wire_types.VARINT:
                value = _convert_varint(field, value)
            else:
                value = _convert_length_delimited(field, value)

            if field.label == REPEATED:
                values.setdefault(field.name, []).append(value)
            else:
                # last one wins for repeated occurrences of a singular field
                values[field.name] = value
        return cls(**values)


def string(number, name, label=IMPLICIT):
    return CommandField(number, name, 'string', label)


def binary(number, name, label=IMPLICIT):
    return CommandField(number, name, 'bytes', label)


class CommandStatementQuery(Command):
    """Execute an ad-hoc SQL query"""
    type_name = constants.PROTOCOL_PACKAGE + '.CommandStatementQuery'
    fields = (string(1, 'query'),)


class CommandStatementUpdate(Command):
    """Execute an ad-hoc SQL update, the result is a DoPutUpdateResult"""
    type_name = constants.PROTOCOL_PACKAGE + '.CommandStatementUpdate'
    fields = (string(1, 'query'),)


class CommandPreparedStatementQuery(Command):
    """Execute (or bind parameters to) a prepared statement query"""
    type_name = constants.PROTOCOL_PACKAGE + '.CommandPreparedStatementQuery'
    fields = (binary(1, 'prepared_statement_handle'),)


class CommandPreparedStatementUpdate(Command):
    """Execute a prepared statement as update"""
    type_name = constants.PROTOCOL_PACKAGE + '.CommandPreparedStatementUpdate'
    fields = (binary(1, 'prepared_statement_handle'),)


class CommandGetCatalogs(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetCatalogs'


class CommandGetSchemas(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetSchemas'
    fields = (
        string(1, 'catalog', OPTIONAL),
        string(2, 'schema_filter_pattern', OPTIONAL),
    )


class CommandGetTables(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetTables'
    fields = (
        string(1, 'catalog', OPTIONAL),
        string(2, 'schema_filter_pattern', OPTIONAL),
        string(3, 'table_name_filter_pattern', OPTIONAL),
        string(4, 'table_types', REPEATED),
        CommandField(5, 'include_schema', 'bool', IMPLICIT),
    )


class CommandGetTableTypes(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetTableTypes'


class CommandGetSqlInfo(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetSqlInfo'
    fields = (CommandField(1, 'info', 'uint32', REPEATED),)


class _TableReferenceCommand(Command):
    fields = (
        string(1, 'catalog', OPTIONAL),
        string(2, 'schema', OPTIONAL),
        string(3, 'table'),
    )


class CommandGetPrimaryKeys(_TableReferenceCommand):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetPrimaryKeys'


class CommandGetExportedKeys(_TableReferenceCommand):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetExportedKeys'


class CommandGetImportedKeys(_TableReferenceCommand):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetImportedKeys'


class CommandGetCrossReference(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.CommandGetCrossReference'
    fields = (
        string(1, 'pk_catalog', OPTIONAL),
        string(2, 'pk_schema', OPTIONAL),
        string(3, 'pk_table'),
        string(4, 'fk_catalog', OPTIONAL),
        string(5, 'fk_schema', OPTIONAL),
        string(6, 'fk_table'),
    )


class ActionCreatePreparedStatementRequest(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.ActionCreatePreparedStatementRequest'
    fields = (string(1, 'query'),)


class ActionCreatePreparedStatementResult(Command):
    """
    Handle and serialized IPC schemas of a new prepared statement.
    Empty schemas mean that the server did not provide them.
    """
    type_name = constants.PROTOCOL_PACKAGE + '.ActionCreatePreparedStatementResult'
    fields = (
        binary(1, 'prepared_statement_handle'),
        binary(2, 'dataset_schema'),
        binary(3, 'parameter_schema'),
    )


class ActionClosePreparedStatementRequest(Command):
    type_name = constants.PROTOCOL_PACKAGE + '.ActionClosePreparedStatementRequest'
    fields = (binary(1, 'prepared_statement_handle'),)


class TicketStatementQuery(Command):
    """Server minted ticket referencing the result of a statement query"""
    type_name = constants.PROTOCOL_PACKAGE + '.TicketStatementQuery'
    fields = (binary(1, 'statement_handle'),)


class DoPutUpdateResult(Command):
    """Sole metadata buffer of a DoPut response to update commands. Sent without envelope."""
    type_name = constants.PROTOCOL_PACKAGE + '.DoPutUpdateResult'
    fields = (CommandField(1, 'record_count', 'int64', IMPLICIT),)
