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

import pyarrow as pa
###
from pyflightsql.exceptions import InvalidRequestError
from pyflightsql.protocol import commands

GET_CATALOGS_SCHEMA = pa.schema([
    pa.field('catalog_name', pa.string()),
])

GET_SCHEMAS_SCHEMA = pa.schema([
    pa.field('catalog_name', pa.string()),
    pa.field('schema_name', pa.string(), nullable=False),
])

GET_TABLES_SCHEMA = pa.schema([
    pa.field('catalog_name', pa.string()),
    pa.field('schema_name', pa.string()),
    pa.field('table_name', pa.string()),
    pa.field('table_type', pa.string()),
])

GET_TABLES_SCHEMA_WITH_INCLUDED_SCHEMA = GET_TABLES_SCHEMA.append(pa.field('table_schema', pa.binary()))

GET_TABLE_TYPES_SCHEMA = pa.schema([
    pa.field('table_type', pa.string()),
])

GET_PRIMARY_KEYS_SCHEMA = pa.schema([
    pa.field('catalog_name', pa.string()),
    pa.field('schema_name', pa.string()),
    pa.field('table_name', pa.string()),
    pa.field('column_name', pa.string()),
    pa.field('key_sequence', pa.int64()),
    pa.field('key_name', pa.string()),
])

GET_IMPORTED_AND_EXPORTED_KEYS_SCHEMA = pa.schema([
    pa.field('pk_catalog_name', pa.string(), nullable=True),
    pa.field('pk_schema_name', pa.string(), nullable=True),
    pa.field('pk_table_name', pa.string(), nullable=False),
    pa.field('pk_column_name', pa.string(), nullable=False),
    pa.field('fk_catalog_name', pa.string(), nullable=True),
    pa.field('fk_schema_name', pa.string(), nullable=True),
    pa.field('fk_table_name', pa.string(), nullable=False),
    pa.field('fk_column_name', pa.string(), nullable=False),
    pa.field('key_sequence', pa.int32(), nullable=False),
    pa.field('fk_key_name', pa.string(), nullable=True),
    pa.field('pk_key_name', pa.string(), nullable=True),
    pa.field('update_rule', pa.uint8(), nullable=False),
    pa.field('delete_rule', pa.uint8(), nullable=False),
])

# Children of the value column of GetSqlInfo results, in type code order
SQL_INFO_VALUE_TYPE = pa.dense_union([
    pa.field('string_value', pa.string()),
    pa.field('int_value', pa.int32()),
    pa.field('bigint_value', pa.int64()),
    pa.field('int32_bitmask', pa.int32()),
])

GET_SQL_INFO_SCHEMA = pa.schema([
    pa.field('info_name', pa.uint32(), nullable=False),
    pa.field('value', SQL_INFO_VALUE_TYPE, nullable=False),
])

SCHEMA_MAPPING = {
    commands.CommandGetCatalogs: GET_CATALOGS_SCHEMA,
    commands.CommandGetSchemas: GET_SCHEMAS_SCHEMA,
    commands.CommandGetTables: GET_TABLES_SCHEMA,
    commands.CommandGetTableTypes: GET_TABLE_TYPES_SCHEMA,
    commands.CommandGetSqlInfo: GET_SQL_INFO_SCHEMA,
    commands.CommandGetPrimaryKeys: GET_PRIMARY_KEYS_SCHEMA,
    commands.CommandGetExportedKeys: GET_IMPORTED_AND_EXPORTED_KEYS_SCHEMA,
    commands.CommandGetImportedKeys: GET_IMPORTED_AND_EXPORTED_KEYS_SCHEMA,
    commands.CommandGetCrossReference: GET_IMPORTED_AND_EXPORTED_KEYS_SCHEMA,
}


def schema_for(command_kind, include_schema=False):
    """Return the fixed result schema of a metadata command
    :param command_kind: command class or command instance
    :param include_schema: only relevant for GetTables, adds the table_schema column.
                           A CommandGetTables instance supplies it itself.
    :returns: pyarrow.Schema
    """
    if isinstance(command_kind, commands.Command):
        if isinstance(command_kind, commands.CommandGetTables):
            include_schema = command_kind.include_schema
        command_kind = command_kind.__class__

    if command_kind is commands.CommandGetTables and include_schema:
        return GET_TABLES_SCHEMA_WITH_INCLUDED_SCHEMA
    try:
        return SCHEMA_MAPPING[command_kind]
    except (KeyError, TypeError):
        raise InvalidRequestError("No fixed result schema for %r" % (command_kind,))
