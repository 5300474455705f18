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
import contextlib
import logging
import re
import sqlite3
import threading
###
import pyarrow as pa
from pyarrow import flight
###
from pyflightsql.exceptions import OperationalError, InvalidRequestError, SchemaMismatchError
from pyflightsql.handler import FlightSqlHandler
from pyflightsql.lifecycle import HandleRegistry
from pyflightsql.server import FlightSqlServer
from pyflightsql.protocol import commands, schemas
from pyflightsql.protocol.envelope import encode
from pyflightsql.protocol.constants import sql_info

logger = logging.getLogger('pyflightsql')
debug = logger.debug

DEFAULT_LOCATION = 'grpc://0.0.0.0:31337'

SEED_STATEMENTS = (
    "CREATE TABLE foreignTable (id INTEGER PRIMARY KEY AUTOINCREMENT, foreignName varchar(100), value int)",
    "CREATE TABLE intTable (id INTEGER PRIMARY KEY AUTOINCREMENT, keyName varchar(100), value int, "
    "foreignId int references foreignTable(id))",
    "INSERT INTO foreignTable (foreignName, value) VALUES ('keyOne', 1)",
    "INSERT INTO foreignTable (foreignName, value) VALUES ('keyTwo', 0)",
    "INSERT INTO foreignTable (foreignName, value) VALUES ('keyThree', -1)",
    "INSERT INTO intTable (keyName, value, foreignId) VALUES ('one', 1, 1)",
    "INSERT INTO intTable (keyName, value, foreignId) VALUES ('zero', 0, 1)",
    "INSERT INTO intTable (keyName, value, foreignId) VALUES ('negative one', -1, 1)",
)

TABLE_TYPES = ('table', 'view')

# Arrow type of result columns by python value type
VALUE_TYPES = {
    int: pa.int64(),
    float: pa.float64(),
    str: pa.string(),
    bytes: pa.binary(),
}

# Foreign key actions as reported by sqlite and their wire representation
FOREIGN_KEY_RULES = {
    'CASCADE': 0,
    'RESTRICT': 1,
    'SET NULL': 2,
    'NO ACTION': 3,
    'SET DEFAULT': 4,
}

STRING_LITERAL_PATTERN = re.compile(r"'(?:[^']|'')*'")
PLACEHOLDER_PATTERN = re.compile(r"('(?:[^']|'')*')|\?")

# Column a placeholder is compared with, e.g. "value = ?"
COMPARED_COLUMN_PATTERN = re.compile(r'(\w+)\s*(?:==|=|<>|!=|<=|>=|<|>|\bLIKE\b|\bIS\b)\s*\?', re.IGNORECASE)
INSERT_PATTERN = re.compile(r'^\s*INSERT\s+INTO\s+\S+\s*\(([^)]*)\)\s*VALUES\s*\(([^)]*)\)', re.IGNORECASE)

# Temporary view used to read the declared types of result columns
DESCRIBE_VIEW = 'flightsql_describe'

SQL_INFO_TYPE_CODES = {
    'string_value': 0,
    'int_value': 1,
    'bigint_value': 2,
    'int32_bitmask': 3,
}

SQL_INFO_VALUES = {
    sql_info.FLIGHT_SQL_SERVER_NAME: ('string_value', 'SQLite'),
    sql_info.FLIGHT_SQL_SERVER_VERSION: ('string_value', sqlite3.sqlite_version),
    sql_info.FLIGHT_SQL_SERVER_ARROW_VERSION: ('string_value', pa.__version__),
    sql_info.FLIGHT_SQL_SERVER_READ_ONLY: ('int_value', 0),
    sql_info.SQL_DDL_CATALOG: ('int_value', 0),
    sql_info.SQL_DDL_SCHEMA: ('int_value', 0),
    sql_info.SQL_DDL_TABLE: ('int_value', 1),
    sql_info.SQL_IDENTIFIER_CASE: ('string_value', 'CASE_INSENSITIVE'),
    sql_info.SQL_IDENTIFIER_QUOTE_CHAR: ('string_value', '"'),
    sql_info.SQL_QUOTED_IDENTIFIER_CASE: ('string_value', 'CASE_INSENSITIVE'),
}

PreparedQuery = collections.namedtuple('PreparedQuery', 'query parameter_count parameters')


def count_parameters(query):
    """Count the positional '?' placeholders of a query outside of string literals"""
    return STRING_LITERAL_PATTERN.sub('', query).count('?')


def replace_placeholders(query, replacement='NULL'):
    """Substitute every positional placeholder outside of string literals"""
    return PLACEHOLDER_PATTERN.sub(lambda match: match.group(1) or replacement, query)


def placeholder_columns(query):
    """Return the column names the placeholders of a query bind to, None if they can not all be resolved"""
    insert = INSERT_PATTERN.match(query)
    if insert is not None:
        columns = [column.strip() for column in insert.group(1).split(',')]
        values = [value.strip() for value in insert.group(2).split(',')]
        if len(columns) != len(values):
            return None
        names = [column for column, value in zip(columns, values) if value == '?']
    else:
        names = COMPARED_COLUMN_PATTERN.findall(STRING_LITERAL_PATTERN.sub("''", query))
    if len(names) != count_parameters(query):
        return None
    return names


def arrow_type_of_declared_type(declared_type):
    """Map a sqlite column declaration onto an arrow type, following sqlite's type affinity rules
    :returns: pyarrow.DataType, or None for NUMERIC affinity whose values may be of any type
    """
    declared_type = (declared_type or '').upper()
    if 'INT' in declared_type:
        return pa.int64()
    elif any(name in declared_type for name in ('CHAR', 'CLOB', 'TEXT')):
        return pa.string()
    elif 'BLOB' in declared_type or not declared_type:
        return pa.binary()
    elif any(name in declared_type for name in ('REAL', 'FLOA', 'DOUB')):
        return pa.float64()
    return None


def rows_to_table(names, rows, declared_types=None):
    """Build a pyarrow.Table from sqlite result rows
    :param declared_types: declared sqlite types of the columns, '' for expressions.
                           Columns without a usable declaration are typed from their values.
    """
    fields = []
    for index, name in enumerate(names):
        arrow_type = None
        if declared_types and declared_types[index]:
            arrow_type = arrow_type_of_declared_type(declared_types[index])
        if arrow_type is None:
            arrow_type = pa.string()
            for row in rows:
                if row[index] is not None:
                    arrow_type = VALUE_TYPES.get(type(row[index]), pa.string())
                    break
        fields.append(pa.field(name, arrow_type))
    schema = pa.schema(fields)
    return pa.Table.from_pylist([dict(zip(names, row)) for row in rows], schema=schema)


def table_to_rows(table):
    return [tuple(row[name] for name in table.column_names) for row in table.to_pylist()]


@contextlib.contextmanager
def sqlite_errors():
    try:
        yield
    except sqlite3.Error as error:
        raise OperationalError("SQLite error: %s" % error) from error


class SqliteFlightSqlHandler(FlightSqlHandler):
    """Example backend serving a sqlite database, by default an in-memory one seeded with two tables"""

    def __init__(self, database=':memory:', seed=True):
        self._connection = sqlite3.connect(database, check_same_thread=False)
        self._lock = threading.Lock()
        self.prepared_statements = HandleRegistry()
        # query results computed by GetFlightInfo, each redeemed by exactly one DoGet
        self.statement_results = HandleRegistry()
        if seed:
            with self._lock, sqlite_errors():
                for statement in SEED_STATEMENTS:
                    self._connection.execute(statement)
                self._connection.commit()

    def __repr__(self):
        return '<SqliteFlightSqlHandler %r>' % self.prepared_statements

    def close(self):
        with self._lock:
            self._connection.close()

    # Helpers

    def _query(self, query, parameters=()):
        """Run a query and return (column names, rows)"""
        with self._lock, sqlite_errors():
            cursor = self._connection.execute(query, parameters)
            rows = cursor.fetchall()
            names = [column[0] for column in cursor.description or ()]
            if self._connection.in_transaction:
                # a data modifying statement sent as query
                self._connection.commit()
        return names, rows

    def _update(self, query, parameter_rows=None):
        """Run an update, once per parameter row if any
        :returns: number of affected rows
        """
        with self._lock, sqlite_errors():
            if parameter_rows:
                cursor = self._connection.executemany(query, parameter_rows)
            else:
                cursor = self._connection.execute(query)
            self._connection.commit()
            return max(cursor.rowcount, 0)

    def _declared_types(self, query):
        """Return the declared types of the result columns of a query without running it.
        Statements which can not be the body of a view (updates, DDL, invalid SQL) return None.
        """
        view_query = replace_placeholders(query.strip().rstrip(';'))
        with self._lock:
            try:
                self._connection.execute('CREATE TEMP VIEW %s AS %s' % (DESCRIBE_VIEW, view_query))
            except sqlite3.Error:
                return None
            try:
                # rows: cid, name, type, notnull, dflt_value, pk
                rows = self._connection.execute('PRAGMA table_info(%s)' % DESCRIBE_VIEW).fetchall()
            except sqlite3.Error:
                rows = None
            finally:
                self._connection.execute('DROP VIEW %s' % DESCRIBE_VIEW)
        if rows is None:
            return None
        return [row[2] for row in rows]

    def _query_table(self, query, parameter_rows=None):
        declared_types = self._declared_types(query)
        if not parameter_rows:
            names, rows = self._query(query)
            return rows_to_table(names, rows, declared_types)
        names, rows = None, []
        for parameters in parameter_rows:
            names, result_rows = self._query(query, parameters)
            rows.extend(result_rows)
        return rows_to_table(names, rows, declared_types)

    def _dataset_schema(self, query):
        """Return the result schema of a query, None for statements which return no result set.
        Only queries are run, with all parameters unbound, to type expression columns from their values.
        """
        declared_types = self._declared_types(query)
        if declared_types is None:
            return None
        names, rows = self._query(query, [None] * count_parameters(query))
        return rows_to_table(names, rows, declared_types).schema

    def _parameter_schema(self, query):
        """Return the schema of the parameters of a statement, named and typed after the columns they bind to.
        None if the statement has no parameters or they can not all be resolved to a column.
        """
        names = placeholder_columns(query)
        if not names:
            return None
        column_types = {}
        for table_name in self._table_names():
            for field in self._table_schema(table_name):
                column_types.setdefault(field.name.lower(), field.type)
        try:
            return pa.schema([pa.field(name, column_types[name.lower()]) for name in names])
        except KeyError:
            return None

    def _mint_result(self, table, descriptor):
        """Keep a computed result for the DoGet of the returned FlightInfo"""
        handle = self.statement_results.create(table)
        return self._flight_info(table.schema, descriptor, commands.TicketStatementQuery(statement_handle=handle))

    @staticmethod
    def _flight_info(schema, descriptor, ticket_command):
        endpoint = flight.FlightEndpoint(encode(ticket_command), [])
        return flight.FlightInfo(schema, descriptor, [endpoint], -1, -1)

    def _table_names(self):
        names, rows = self._query("SELECT name FROM sqlite_master WHERE type = 'table' "
                                  "AND name NOT LIKE 'sqlite_%' ORDER BY name")
        return [row[0] for row in rows]

    def _table_schema(self, table_name):
        _, rows = self._query("PRAGMA table_info(%s)" % self._quote(table_name))
        # rows: cid, name, type, notnull, dflt_value, pk
        return pa.schema([pa.field(row[1], arrow_type_of_declared_type(row[2]) or pa.string(), nullable=not row[3])
                          for row in rows])

    @staticmethod
    def _quote(identifier):
        return '"%s"' % identifier.replace('"', '""')

    def _foreign_keys(self, fk_table):
        """Return rows of the imported/exported keys schema for all foreign keys of fk_table"""
        _, rows = self._query("PRAGMA foreign_key_list(%s)" % self._quote(fk_table))
        result = []
        # rows: id, seq, table, from, to, on_update, on_delete, match
        for key_id, seq, pk_table, fk_column, pk_column, on_update, on_delete, _ in rows:
            if pk_column is None:
                pk_column = self._primary_key_columns(pk_table)[seq]
            result.append({
                'pk_catalog_name': None,
                'pk_schema_name': None,
                'pk_table_name': pk_table,
                'pk_column_name': pk_column,
                'fk_catalog_name': None,
                'fk_schema_name': None,
                'fk_table_name': fk_table,
                'fk_column_name': fk_column,
                'key_sequence': seq + 1,
                'fk_key_name': None,
                'pk_key_name': None,
                'update_rule': FOREIGN_KEY_RULES.get(on_update, FOREIGN_KEY_RULES['NO ACTION']),
                'delete_rule': FOREIGN_KEY_RULES.get(on_delete, FOREIGN_KEY_RULES['NO ACTION']),
            })
        return result

    def _primary_key_columns(self, table_name):
        _, rows = self._query("PRAGMA table_info(%s)" % self._quote(table_name))
        return [row[1] for row in sorted((row for row in rows if row[5]), key=lambda row: row[5])]

    # Statements

    def get_flight_info_statement(self, command, context, descriptor):
        return self._mint_result(self._query_table(command.query), descriptor)

    def get_schema_statement(self, command, context, descriptor):
        schema = self._dataset_schema(command.query)
        return schema if schema is not None else pa.schema([])

    def do_get_statement(self, command, context):
        table = self.statement_results.close(command.statement_handle)
        return flight.RecordBatchStream(table)

    def do_put_statement_update(self, command, context, reader):
        record_count = self._update(command.query)
        debug('Statement update affected %d rows', record_count)
        return record_count

    # Prepared statements

    def create_prepared_statement(self, request, context):
        with self._lock, sqlite_errors():
            # compiles the statement without executing it
            self._connection.execute('EXPLAIN ' + request.query, [None] * count_parameters(request.query))
        dataset_schema = self._dataset_schema(request.query)
        parameter_schema = self._parameter_schema(request.query)
        handle = self.prepared_statements.create(
            PreparedQuery(request.query, count_parameters(request.query), None)
        )
        return commands.ActionCreatePreparedStatementResult(
            prepared_statement_handle=handle,
            dataset_schema=dataset_schema.serialize().to_pybytes() if dataset_schema is not None else None,
            parameter_schema=parameter_schema.serialize().to_pybytes() if parameter_schema is not None else None,
        )

    def close_prepared_statement(self, request, context):
        self.prepared_statements.close(request.prepared_statement_handle)

    def _read_parameters(self, prepared, reader):
        table = reader.read_all()
        if table.num_columns == 0 and table.num_rows == 0:
            return None
        if table.num_columns != prepared.parameter_count:
            raise SchemaMismatchError("Statement expects %d parameters, got %d columns" %
                                      (prepared.parameter_count, table.num_columns))
        return table_to_rows(table)

    def _parameter_rows(self, prepared):
        if prepared.parameter_count and not prepared.parameters:
            raise SchemaMismatchError("Statement expects %d parameters, none are bound" % prepared.parameter_count)
        return prepared.parameters

    def do_put_prepared_statement_query(self, command, context, reader):
        handle = command.prepared_statement_handle
        prepared = self.prepared_statements.get(handle)
        parameters = self._read_parameters(prepared, reader)
        self.prepared_statements.replace(handle, prepared._replace(parameters=parameters))

    def get_flight_info_prepared_statement(self, command, context, descriptor):
        prepared = self.prepared_statements.get(command.prepared_statement_handle)
        return self._mint_result(self._query_table(prepared.query, self._parameter_rows(prepared)), descriptor)

    def do_get_prepared_statement(self, command, context):
        prepared = self.prepared_statements.get(command.prepared_statement_handle)
        return flight.RecordBatchStream(self._query_table(prepared.query, self._parameter_rows(prepared)))

    def do_put_prepared_statement_update(self, command, context, reader):
        prepared = self.prepared_statements.get(command.prepared_statement_handle)
        parameters = self._read_parameters(prepared, reader) or prepared.parameters
        if prepared.parameter_count and not parameters:
            raise SchemaMismatchError("Statement expects %d parameters, none are bound" % prepared.parameter_count)
        return self._update(prepared.query, parameters)

    # Metadata

    def _metadata_table(self, command):
        schema = schemas.schema_for(command)
        return pa.Table.from_pylist(self._metadata_rows(command), schema=schema)

    def _metadata_rows(self, command):
        if isinstance(command, (commands.CommandGetCatalogs, commands.CommandGetSchemas)):
            # sqlite knows neither catalogs nor schemas
            return []
        elif isinstance(command, commands.CommandGetTables):
            return self._table_rows(command)
        elif isinstance(command, commands.CommandGetTableTypes):
            return [{'table_type': table_type} for table_type in TABLE_TYPES]
        elif isinstance(command, commands.CommandGetPrimaryKeys):
            return [{
                'catalog_name': None,
                'schema_name': None,
                'table_name': command.table,
                'column_name': column_name,
                'key_sequence': sequence,
                'key_name': None,
            } for sequence, column_name in enumerate(self._primary_key_columns(command.table), 1)]
        elif isinstance(command, commands.CommandGetImportedKeys):
            return self._foreign_keys(command.table)
        elif isinstance(command, commands.CommandGetExportedKeys):
            return [row for table_name in self._table_names() for row in self._foreign_keys(table_name)
                    if row['pk_table_name'] == command.table]
        elif isinstance(command, commands.CommandGetCrossReference):
            return [row for row in self._foreign_keys(command.fk_table) if row['pk_table_name'] == command.pk_table]
        raise InvalidRequestError("Unsupported metadata command %s" % command.__class__.__name__)

    def _in_unnamed_schema(self, command):
        """Whether the catalog and schema filters of a command select sqlite's single unnamed schema"""
        if command.catalog:
            return False
        if command.schema_filter_pattern is None:
            return True
        _, rows = self._query("SELECT '' LIKE ?", (command.schema_filter_pattern,))
        return bool(rows[0][0])

    def _table_rows(self, command):
        if not self._in_unnamed_schema(command):
            return []
        query = "SELECT name, type FROM sqlite_master WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%'"
        parameters = []
        if command.table_name_filter_pattern is not None:
            query += " AND name LIKE ?"
            parameters.append(command.table_name_filter_pattern)
        if command.table_types:
            query += " AND type IN (%s)" % ', '.join('?' * len(command.table_types))
            parameters.extend(command.table_types)
        _, rows = self._query(query + " ORDER BY name", parameters)

        result = []
        for table_name, table_type in rows:
            row = {'catalog_name': None, 'schema_name': None, 'table_name': table_name, 'table_type': table_type}
            if command.include_schema:
                row['table_schema'] = self._table_schema(table_name).serialize().to_pybytes()
            result.append(row)
        return result

    def _sql_info_table(self, command):
        codes = command.info or list(sql_info.ALL)
        type_ids, offsets = [], []
        children = collections.OrderedDict((name, []) for name in SQL_INFO_TYPE_CODES)
        for code in codes:
            try:
                child_name, value = SQL_INFO_VALUES[code]
            except KeyError:
                raise InvalidRequestError("Unknown SQL info code %d" % code)
            type_ids.append(SQL_INFO_TYPE_CODES[child_name])
            offsets.append(len(children[child_name]))
            children[child_name].append(value)

        union_type = schemas.SQL_INFO_VALUE_TYPE
        value_fields = [union_type.field(i) for i in range(union_type.num_fields)]
        child_arrays = [pa.array(values, type=field.type)
                        for values, field in zip(children.values(), value_fields)]
        value = pa.UnionArray.from_dense(
            pa.array(type_ids, type=pa.int8()),
            pa.array(offsets, type=pa.int32()),
            child_arrays,
            list(SQL_INFO_TYPE_CODES),
            list(SQL_INFO_TYPE_CODES.values()),
        )
        info_name = pa.array(codes, type=pa.uint32())
        return pa.Table.from_arrays([info_name, value], schema=schemas.GET_SQL_INFO_SCHEMA)

    def _get_metadata_info(self, command, context, descriptor):
        return self._flight_info(schemas.schema_for(command), descriptor, command)

    get_flight_info_catalogs = _get_metadata_info
    get_flight_info_schemas = _get_metadata_info
    get_flight_info_tables = _get_metadata_info
    get_flight_info_table_types = _get_metadata_info
    get_flight_info_sql_info = _get_metadata_info
    get_flight_info_primary_keys = _get_metadata_info
    get_flight_info_exported_keys = _get_metadata_info
    get_flight_info_imported_keys = _get_metadata_info
    get_flight_info_cross_reference = _get_metadata_info

    def _do_get_metadata(self, command, context):
        return flight.RecordBatchStream(self._metadata_table(command))

    do_get_catalogs = _do_get_metadata
    do_get_schemas = _do_get_metadata
    do_get_tables = _do_get_metadata
    do_get_table_types = _do_get_metadata
    do_get_primary_keys = _do_get_metadata
    do_get_exported_keys = _do_get_metadata
    do_get_imported_keys = _do_get_metadata
    do_get_cross_reference = _do_get_metadata

    def do_get_sql_info(self, command, context):
        return flight.RecordBatchStream(self._sql_info_table(command))


def serve(location=DEFAULT_LOCATION, database=':memory:', **kwargs):
    """Run a flight sql server for a sqlite database until interrupted"""
    server = FlightSqlServer(SqliteFlightSqlHandler(database), location, **kwargs)
    logger.info('Serving sqlite database %s on port %d', database, server.port)
    server.serve()


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    serve()
