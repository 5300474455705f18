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
import pyarrow as pa
from pyarrow import flight
###
from pyflightsql.exceptions import InterfaceError
from pyflightsql.statement import PreparedStatement
from pyflightsql.transport import translated_errors
from pyflightsql.protocol import commands, wire
from pyflightsql.protocol.envelope import encode, decode
from pyflightsql.protocol.constants import action_types

logger = logging.getLogger('pyflightsql')
debug = logger.debug

EMPTY_SCHEMA = pa.schema([])


class FlightSqlClient(object):
    """
    SQL client on top of an Arrow Flight transport.
    All operations are blocking, call options are passed through to the transport unmodified.
    """
    def __init__(self, transport, timeout=None):
        self.transport = transport
        self.timeout = timeout
        self._closed = False

    def __repr__(self):
        return '<FlightSqlClient transport=%r>' % self.transport

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.closed:
            self.close()

    @property
    def closed(self):
        return self._closed

    def _check_closed(self):
        if self.closed:
            raise InterfaceError("Client closed")

    def _options(self, options):
        if options is None and self.timeout is not None:
            return flight.FlightCallOptions(timeout=self.timeout)
        return options

    @staticmethod
    def _descriptor(command):
        return flight.FlightDescriptor.for_command(encode(command))

    def _get_flight_info(self, command, options=None):
        self._check_closed()
        debug('Requesting flight info for %s', command.__class__.__name__)
        return self.transport.get_flight_info(self._descriptor(command), self._options(options))

    def _do_put_update(self, command, batch=None, options=None):
        """Push command with optional batch and read the DoPutUpdateResult metadata
        :returns: number of affected rows as reported by the server
        """
        self._check_closed()
        schema = batch.schema if batch is not None else EMPTY_SCHEMA
        writer, reader = self.transport.do_put(self._descriptor(command), schema, self._options(options))
        with translated_errors():
            try:
                if batch is not None:
                    writer.write(batch)
                writer.done_writing()
                buf = reader.read()
            finally:
                writer.close()
        if buf is None:
            raise InterfaceError("Server did not return an update result for %s" % command.__class__.__name__)
        result = commands.DoPutUpdateResult.unpack_data(wire.to_bytes(buf))
        debug('%s affected %d rows', command.__class__.__name__, result.record_count)
        return result.record_count

    def _do_put_parameters(self, command, batch, options=None):
        """Push a parameter batch for a prepared statement, no result is expected"""
        self._check_closed()
        writer, _ = self.transport.do_put(self._descriptor(command), batch.schema, self._options(options))
        with translated_errors():
            try:
                writer.write(batch)
                writer.done_writing()
            finally:
                writer.close()

    def _do_action(self, action_type, request, options=None):
        self._check_closed()
        action = flight.Action(action_type, encode(request))
        return self.transport.do_action(action, self._options(options))

    def execute(self, query, options=None):
        """Execute an ad-hoc SQL query
        :returns: pyarrow.flight.FlightInfo with the tickets to fetch the result
        """
        return self._get_flight_info(commands.CommandStatementQuery(query=query), options)

    def execute_update(self, query, options=None):
        """Execute an ad-hoc SQL update
        :returns: number of affected rows
        """
        return self._do_put_update(commands.CommandStatementUpdate(query=query), options=options)

    def get_catalogs(self, options=None):
        return self._get_flight_info(commands.CommandGetCatalogs(), options)

    def get_schemas(self, catalog=None, schema_filter_pattern=None, options=None):
        return self._get_flight_info(
            commands.CommandGetSchemas(catalog=catalog, schema_filter_pattern=schema_filter_pattern), options
        )

    def get_tables(self, catalog=None, schema_filter_pattern=None, table_name_filter_pattern=None,
                   include_schema=False, table_types=None, options=None):
        command = commands.CommandGetTables(
            catalog=catalog,
            schema_filter_pattern=schema_filter_pattern,
            table_name_filter_pattern=table_name_filter_pattern,
            table_types=table_types,
            include_schema=include_schema,
        )
        return self._get_flight_info(command, options)

    def get_table_types(self, options=None):
        return self._get_flight_info(commands.CommandGetTableTypes(), options)

    def get_primary_keys(self, catalog, schema, table, options=None):
        return self._get_flight_info(
            commands.CommandGetPrimaryKeys(catalog=catalog, schema=schema, table=table), options
        )

    def get_exported_keys(self, catalog, schema, table, options=None):
        return self._get_flight_info(
            commands.CommandGetExportedKeys(catalog=catalog, schema=schema, table=table), options
        )

    def get_imported_keys(self, catalog, schema, table, options=None):
        return self._get_flight_info(
            commands.CommandGetImportedKeys(catalog=catalog, schema=schema, table=table), options
        )

    def get_cross_reference(self, pk_catalog, pk_schema, pk_table, fk_catalog, fk_schema, fk_table, options=None):
        command = commands.CommandGetCrossReference(
            pk_catalog=pk_catalog, pk_schema=pk_schema, pk_table=pk_table,
            fk_catalog=fk_catalog, fk_schema=fk_schema, fk_table=fk_table,
        )
        return self._get_flight_info(command, options)

    def get_sql_info(self, info=None, options=None):
        """Request server metadata
        :param info: list of sql info codes (see protocol.constants.sql_info), all if empty
        """
        return self._get_flight_info(commands.CommandGetSqlInfo(info=info), options)

    def get_schema(self, command, options=None):
        """Return the result schema of a command without executing it"""
        self._check_closed()
        result = self.transport.get_schema(self._descriptor(command), self._options(options))
        return result.schema

    def prepare(self, query, options=None):
        """Create a prepared statement on the server
        :param query: SQL statement, optionally with parameter placeholders
        :returns: PreparedStatement instance bound to this client
        """
        request = commands.ActionCreatePreparedStatementRequest(query=query)
        results = self._do_action(action_types.CREATE_PREPARED_STATEMENT, request, options)
        if not results:
            raise InterfaceError("Server did not return a result for %s" % action_types.CREATE_PREPARED_STATEMENT)

        result = decode(results[0].body, expected=commands.ActionCreatePreparedStatementResult)
        debug('Created prepared statement %r', result.prepared_statement_handle)
        return PreparedStatement(
            self,
            result.prepared_statement_handle,
            dataset_schema=result.dataset_schema or None,
            parameter_schema=result.parameter_schema or None,
            options=options,
        )

    def close_prepared_statement(self, handle, options=None):
        request = commands.ActionClosePreparedStatementRequest(prepared_statement_handle=handle)
        self._do_action(action_types.CLOSE_PREPARED_STATEMENT, request, options)
        debug('Closed prepared statement %r', handle)

    def do_get(self, ticket, options=None):
        """Redeem a ticket minted by the server
        :returns: pyarrow.flight.FlightStreamReader
        """
        self._check_closed()
        return self.transport.do_get(ticket, self._options(options))

    def fetch_all(self, flight_info, options=None):
        """Read the data of all endpoints of a FlightInfo into a single pyarrow.Table"""
        tables = []
        for endpoint in flight_info.endpoints:
            reader = self.do_get(endpoint.ticket, options)
            with translated_errors():
                tables.append(reader.read_all())
        if not tables:
            return flight_info.schema.empty_table()
        return pa.concat_tables(tables)

    def list_actions(self, options=None):
        self._check_closed()
        return self.transport.list_actions(self._options(options))

    def close(self):
        self._check_closed()
        try:
            self.transport.close()
        finally:
            self._closed = True
