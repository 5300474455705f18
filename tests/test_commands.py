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
###
from pyflightsql.protocol import commands
from pyflightsql.protocol.commands import Command, CommandField, COMMAND_MAPPING
from pyflightsql.exceptions import InterfaceError, MalformedError

TYPE_URL_PREFIX = 'type.googleapis.com/arrow.flight.protocol.sql.'


class TestCommandFields(object):

    @staticmethod
    def test_implicit_fields_default_to_zero_values():
        command = commands.CommandStatementQuery()
        assert command.query == ''
        assert commands.DoPutUpdateResult().record_count == 0
        assert commands.CommandGetTables().include_schema is False

    @staticmethod
    def test_optional_fields_default_to_none():
        command = commands.CommandGetSchemas()
        assert command.catalog is None
        assert command.schema_filter_pattern is None

    @staticmethod
    def test_repeated_fields_default_to_empty_list():
        assert commands.CommandGetTables().table_types == []
        assert commands.CommandGetSqlInfo().info == []

    @staticmethod
    def test_positional_arguments_follow_field_order():
        command = commands.CommandGetPrimaryKeys('catalog', 'schema', 'table')
        assert command.catalog == 'catalog'
        assert command.schema == 'schema'
        assert command.table == 'table'

    @staticmethod
    def test_text_for_bytes_field_is_encoded():
        command = commands.CommandPreparedStatementQuery(prepared_statement_handle='query')
        assert command.prepared_statement_handle == b'query'

    @staticmethod
    def test_unknown_field_raises():
        with pytest.raises(TypeError):
            commands.CommandStatementQuery(sql='SELECT 1')

    @staticmethod
    def test_too_many_arguments_raise():
        with pytest.raises(TypeError):
            commands.CommandStatementQuery('SELECT 1', 'SELECT 2')

    @staticmethod
    def test_equality():
        assert commands.CommandStatementQuery('SELECT 1') == commands.CommandStatementQuery(query='SELECT 1')
        assert commands.CommandStatementQuery('SELECT 1') != commands.CommandStatementQuery('SELECT 2')
        assert commands.CommandStatementQuery('x') != commands.CommandStatementUpdate('x')

    @staticmethod
    def test_repr():
        assert repr(commands.CommandGetCatalogs()) == '<CommandGetCatalogs>'
        assert repr(commands.CommandStatementQuery('SELECT 1')) == "<CommandStatementQuery query='SELECT 1'>"


class TestPackData(object):

    @staticmethod
    def test_pack_string_field():
        assert commands.CommandStatementQuery('query').pack_data() == b'\x0a\x05query'

    @staticmethod
    def test_default_implicit_values_are_not_packed():
        assert commands.CommandStatementQuery().pack_data() == b''
        assert commands.CommandGetTables(include_schema=False).pack_data() == b''
        assert commands.DoPutUpdateResult(record_count=0).pack_data() == b''

    @staticmethod
    def test_empty_optional_string_is_packed():
        assert commands.CommandGetSchemas(catalog='').pack_data() == b'\x0a\x00'

    @staticmethod
    def test_pack_bool_field():
        assert commands.CommandGetTables(include_schema=True).pack_data() == b'\x28\x01'

    @staticmethod
    def test_pack_repeated_string_field():
        command = commands.CommandGetTables(table_types=['type1', 'type2'])
        assert command.pack_data() == b'\x22\x05type1\x22\x05type2'

    @staticmethod
    def test_pack_repeated_uint32_field_is_packed():
        assert commands.CommandGetSqlInfo(info=[0, 500]).pack_data() == b'\x0a\x03\x00\xf4\x03'

    @staticmethod
    def test_pack_int64_field():
        assert commands.DoPutUpdateResult(record_count=100).pack_data() == b'\x08\x64'
        assert commands.DoPutUpdateResult(record_count=-1).pack_data() == b'\x08' + b'\xff' * 9 + b'\x01'


class TestUnpackData(object):

    @staticmethod
    def test_unpack_negative_int64():
        assert commands.DoPutUpdateResult.unpack_data(b'\x08' + b'\xff' * 9 + b'\x01').record_count == -1

    @staticmethod
    def test_unpack_unpacked_repeated_uint32():
        command = commands.CommandGetSqlInfo.unpack_data(b'\x08\x00\x08\xf4\x03')
        assert command.info == [0, 500]

    @staticmethod
    def test_unpack_absent_optional_field_is_none():
        command = commands.CommandGetSchemas.unpack_data(b'\x12\x01%')
        assert command.catalog is None
        assert command.schema_filter_pattern == '%'

    @staticmethod
    def test_unknown_fields_are_skipped():
        command = commands.CommandStatementQuery.unpack_data(b'\x0a\x01x\x78\x05\x82\x01\x02ab')
        assert command == commands.CommandStatementQuery('x')

    @staticmethod
    def test_wire_type_mismatch_raises():
        with pytest.raises(MalformedError):
            commands.CommandStatementQuery.unpack_data(b'\x08\x01')

    @staticmethod
    def test_invalid_utf8_raises():
        with pytest.raises(MalformedError):
            commands.CommandStatementQuery.unpack_data(b'\x0a\x02\xff\xfe')

    @staticmethod
    def test_uint32_overflow_raises():
        with pytest.raises(MalformedError):
            commands.CommandGetSqlInfo.unpack_data(b'\x08\x80\x80\x80\x80\x10')


class TestCommandMetaClass(object):

    @staticmethod
    def test_all_protocol_messages_are_registered():
        names = [
            'CommandStatementQuery', 'CommandPreparedStatementQuery', 'CommandStatementUpdate',
            'CommandPreparedStatementUpdate', 'CommandGetCatalogs', 'CommandGetSchemas', 'CommandGetTables',
            'CommandGetTableTypes', 'CommandGetSqlInfo', 'CommandGetPrimaryKeys', 'CommandGetExportedKeys',
            'CommandGetImportedKeys', 'CommandGetCrossReference', 'ActionCreatePreparedStatementRequest',
            'ActionCreatePreparedStatementResult', 'ActionClosePreparedStatementRequest', 'TicketStatementQuery',
            'DoPutUpdateResult',
        ]
        for name in names:
            assert COMMAND_MAPPING[TYPE_URL_PREFIX + name] is getattr(commands, name)

    @staticmethod
    def test_command_type_url():
        assert commands.CommandGetCatalogs.type_url == TYPE_URL_PREFIX + 'CommandGetCatalogs'

    @staticmethod
    def test_command_without_type_name_will_be_not_in_mapping():
        class UnnamedCommand(Command):
            fields = (CommandField(1, 'value', 'string', 'implicit'),)
        assert UnnamedCommand not in COMMAND_MAPPING.values()
        assert UnnamedCommand.type_url is None

    @staticmethod
    def test_duplicate_type_name_raises_exception():
        with pytest.raises(InterfaceError):
            class DuplicateCommand(Command):
                type_name = commands.CommandGetCatalogs.type_name
        assert COMMAND_MAPPING[commands.CommandGetCatalogs.type_url] is commands.CommandGetCatalogs

    @staticmethod
    def test_command_mapping_updates_after_class_left_scope():
        type_url = 'type.googleapis.com/test.TemporaryCommand'
        assert type_url not in COMMAND_MAPPING

        class TemporaryCommand(Command):
            type_name = 'test.TemporaryCommand'
        assert COMMAND_MAPPING[type_url] == TemporaryCommand

        del TemporaryCommand
        import gc
        gc.collect()

        assert type_url not in COMMAND_MAPPING
