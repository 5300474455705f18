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

import contextlib
import logging
###
import pyarrow as pa
from pyarrow import flight
###
from pyflightsql.exceptions import DatabaseError, InvalidRequestError
from pyflightsql.handler import FlightSqlHandler
from pyflightsql.protocol import commands, schemas, wire
from pyflightsql.protocol.envelope import Envelope, encode, decode
from pyflightsql.protocol.commands import COMMAND_MAPPING
from pyflightsql.protocol.constants import action_types, status_codes

logger = logging.getLogger('pyflightsql')
debug = logger.debug

# Routing tables: command class -> name of the FlightSqlHandler method serving it

GET_FLIGHT_INFO_ROUTES = {
    commands.CommandStatementQuery: 'get_flight_info_statement',
    commands.CommandPreparedStatementQuery: 'get_flight_info_prepared_statement',
    commands.CommandGetCatalogs: 'get_flight_info_catalogs',
    commands.CommandGetSchemas: 'get_flight_info_schemas',
    commands.CommandGetTables: 'get_flight_info_tables',
    commands.CommandGetTableTypes: 'get_flight_info_table_types',
    commands.CommandGetSqlInfo: 'get_flight_info_sql_info',
    commands.CommandGetPrimaryKeys: 'get_flight_info_primary_keys',
    commands.CommandGetExportedKeys: 'get_flight_info_exported_keys',
    commands.CommandGetImportedKeys: 'get_flight_info_imported_keys',
    commands.CommandGetCrossReference: 'get_flight_info_cross_reference',
}

DO_GET_ROUTES = {
    commands.TicketStatementQuery: 'do_get_statement',
    commands.CommandPreparedStatementQuery: 'do_get_prepared_statement',
    commands.CommandGetCatalogs: 'do_get_catalogs',
    commands.CommandGetSchemas: 'do_get_schemas',
    commands.CommandGetTables: 'do_get_tables',
    commands.CommandGetTableTypes: 'do_get_table_types',
    commands.CommandGetSqlInfo: 'do_get_sql_info',
    commands.CommandGetPrimaryKeys: 'do_get_primary_keys',
    commands.CommandGetExportedKeys: 'do_get_exported_keys',
    commands.CommandGetImportedKeys: 'do_get_imported_keys',
    commands.CommandGetCrossReference: 'do_get_cross_reference',
}

DO_PUT_ROUTES = {
    commands.CommandStatementUpdate: 'do_put_statement_update',
    commands.CommandPreparedStatementQuery: 'do_put_prepared_statement_query',
    commands.CommandPreparedStatementUpdate: 'do_put_prepared_statement_update',
}

# DoPut commands answered with a DoPutUpdateResult metadata buffer
UPDATE_COMMANDS = (commands.CommandStatementUpdate, commands.CommandPreparedStatementUpdate)

# GetSchema answers metadata commands from the schema catalog, statements from the handler
GET_SCHEMA_ROUTES = {
    commands.CommandStatementQuery: 'get_schema_statement',
}

ACTION_ROUTES = {
    action_types.CREATE_PREPARED_STATEMENT: (commands.ActionCreatePreparedStatementRequest,
                                             'create_prepared_statement'),
    action_types.CLOSE_PREPARED_STATEMENT: (commands.ActionClosePreparedStatementRequest,
                                            'close_prepared_statement'),
}

# Messages which never arrive as a descriptor command or ticket
NON_ROUTABLE_COMMANDS = {
    commands.ActionCreatePreparedStatementResult,
    commands.DoPutUpdateResult,
}


def _check_routes():
    """Ensure that every command kind is served and every route names a handler method"""
    routed = set(GET_FLIGHT_INFO_ROUTES) | set(DO_GET_ROUTES) | set(DO_PUT_ROUTES)
    routed |= {request_class for request_class, _ in ACTION_ROUTES.values()}
    missing = set(COMMAND_MAPPING.values()) - routed - NON_ROUTABLE_COMMANDS
    assert not missing, 'Command kinds without route: %s' % ', '.join(sorted(c.__name__ for c in missing))

    # Every metadata command is served by GetFlightInfo and DoGet alike
    assert set(GET_FLIGHT_INFO_ROUTES) - {commands.CommandStatementQuery} == \
        set(DO_GET_ROUTES) - {commands.TicketStatementQuery}, 'GetFlightInfo and DoGet routes differ'

    method_names = list(GET_FLIGHT_INFO_ROUTES.values()) + list(DO_GET_ROUTES.values()) + \
        list(DO_PUT_ROUTES.values()) + list(GET_SCHEMA_ROUTES.values()) + [m for _, m in ACTION_ROUTES.values()]
    for method_name in method_names:
        assert hasattr(FlightSqlHandler, method_name), 'FlightSqlHandler lacks %s' % method_name


_check_routes()


class ServerDispatcher(object):
    """
    Decode the envelopes of incoming flight calls and route them to the handler.
    Tags which are unknown, or known but not served by an entry point, fail with InvalidRequestError
    before any handler method is invoked.
    """
    def __init__(self, handler):
        self.handler = handler

    def __repr__(self):
        return '<ServerDispatcher handler=%r>' % self.handler

    @staticmethod
    def _resolve(data, routes, entry_point):
        envelope = Envelope.unpack(data)
        command_class = envelope.command_class
        if command_class not in routes:
            raise InvalidRequestError("%s does not support command %s" % (entry_point, envelope.type_url))
        return envelope.unwrap(command_class), routes[command_class]

    @staticmethod
    def _command_data(descriptor, entry_point):
        if descriptor.descriptor_type != flight.DescriptorType.CMD:
            raise InvalidRequestError("%s requires a command descriptor" % entry_point)
        return descriptor.command

    def get_flight_info(self, context, descriptor):
        data = self._command_data(descriptor, 'GetFlightInfo')
        command, method_name = self._resolve(data, GET_FLIGHT_INFO_ROUTES, 'GetFlightInfo')
        debug('GetFlightInfo dispatches %s to %s', command.__class__.__name__, method_name)
        return getattr(self.handler, method_name)(command, context, descriptor)

    def get_schema(self, context, descriptor):
        data = self._command_data(descriptor, 'GetSchema')
        envelope = Envelope.unpack(data)
        command_class = envelope.command_class
        if command_class in GET_SCHEMA_ROUTES:
            command = envelope.unwrap(command_class)
            method_name = GET_SCHEMA_ROUTES[command_class]
            debug('GetSchema dispatches %s to %s', command_class.__name__, method_name)
            return getattr(self.handler, method_name)(command, context, descriptor)
        if command_class in schemas.SCHEMA_MAPPING:
            return schemas.schema_for(envelope.unwrap(command_class))
        raise InvalidRequestError("GetSchema does not support command %s" % envelope.type_url)

    def do_get(self, context, ticket):
        command, method_name = self._resolve(ticket.ticket, DO_GET_ROUTES, 'DoGet')
        debug('DoGet dispatches %s to %s', command.__class__.__name__, method_name)
        return getattr(self.handler, method_name)(command, context)

    def do_put(self, context, descriptor, reader, writer):
        data = self._command_data(descriptor, 'DoPut')
        command, method_name = self._resolve(data, DO_PUT_ROUTES, 'DoPut')
        debug('DoPut dispatches %s to %s', command.__class__.__name__, method_name)
        record_count = getattr(self.handler, method_name)(command, context, reader)
        if isinstance(command, UPDATE_COMMANDS):
            result = commands.DoPutUpdateResult(record_count=record_count)
            writer.write(pa.py_buffer(result.pack_data()))

    def list_actions(self, context):
        return [(action_type, action_types.DESCRIPTIONS[action_type])
                for action_type in (action_types.CREATE_PREPARED_STATEMENT, action_types.CLOSE_PREPARED_STATEMENT)]

    def do_action(self, context, action):
        try:
            request_class, method_name = ACTION_ROUTES[action.type]
        except KeyError:
            raise InvalidRequestError("Unknown action type %r" % action.type)

        request = decode(wire.to_bytes(action.body), expected=request_class)
        debug('DoAction dispatches %s to %s', action.type, method_name)
        result = getattr(self.handler, method_name)(request, context)
        if result is None:
            return []
        return [flight.Result(encode(result))]


# Arrow exception raised for each protocol status code. The client restores the error from the code prefix.
ARROW_ERRORS = {
    status_codes.INVALID_REQUEST: pa.ArrowInvalid,
    status_codes.MALFORMED: pa.ArrowInvalid,
    status_codes.NOT_IMPLEMENTED: pa.ArrowNotImplementedError,
    status_codes.INVALID_HANDLE: pa.ArrowKeyError,
    status_codes.SCHEMA_MISMATCH: pa.ArrowTypeError,
}


@contextlib.contextmanager
def arrow_errors():
    """Translate protocol errors into arrow errors carrying the status code as message prefix"""
    try:
        yield
    except DatabaseError as error:
        if error.code not in ARROW_ERRORS:
            raise
        debug('Returning %s: %s', error.code, error)
        raise ARROW_ERRORS[error.code]('%s: %s' % (error.code, error)) from error


class FlightSqlServer(flight.FlightServerBase):
    """
    Arrow Flight server delegating all calls to a ServerDispatcher over the given handler.

    Usage:
    >>> server = FlightSqlServer(SqliteFlightSqlHandler(), 'grpc://0.0.0.0:31337')
    >>> server.serve()
    """
    def __init__(self, handler, location=None, **kwargs):
        super(FlightSqlServer, self).__init__(location, **kwargs)
        self.dispatcher = ServerDispatcher(handler)

    def get_flight_info(self, context, descriptor):
        with arrow_errors():
            return self.dispatcher.get_flight_info(context, descriptor)

    def get_schema(self, context, descriptor):
        with arrow_errors():
            return flight.SchemaResult(self.dispatcher.get_schema(context, descriptor))

    def do_get(self, context, ticket):
        with arrow_errors():
            return self.dispatcher.do_get(context, ticket)

    def do_put(self, context, descriptor, reader, writer):
        with arrow_errors():
            self.dispatcher.do_put(context, descriptor, reader, writer)

    def list_actions(self, context):
        return self.dispatcher.list_actions(context)

    def do_action(self, context, action):
        with arrow_errors():
            return self.dispatcher.do_action(context, action)
