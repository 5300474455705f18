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
###
from pyflightsql.exceptions import InvalidHandleError, SchemaMismatchError
from pyflightsql.protocol import commands

logger = logging.getLogger('pyflightsql')
debug = logger.debug


def read_schema(data):
    """Deserialize an IPC encoded schema, None for empty data"""
    if not data:
        return None
    return pa.ipc.read_schema(pa.py_buffer(data))


class PreparedStatement(object):
    """
    Reference to a prepared statement resource on the server.
    The server owns the state of the handle, this object only carries it into later commands.
    """

    def __init__(self, client, handle, dataset_schema=None, parameter_schema=None, options=None):
        """Initialize PreparedStatement object
        :param client: FlightSqlClient instance which created the statement
        :param handle: opaque bytes identifying the statement on the server
        :param dataset_schema: IPC serialized result set schema or None
        :param parameter_schema: IPC serialized parameter schema or None
        :param options: call options used for all calls of this statement by default
        """
        self._client = client
        self.handle = handle
        self._dataset_schema = dataset_schema
        self._parameter_schema = parameter_schema
        self._options = options
        self._parameters = None
        self._closed = False

    def __repr__(self):
        return '<PreparedStatement handle=%r>' % self.handle

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
            raise InvalidHandleError("Prepared statement %r is closed" % self.handle)

    def _call_options(self, options):
        return options if options is not None else self._options

    def get_parameter_schema(self):
        """Return the parameter schema negotiated at creation or None"""
        self._check_closed()
        return read_schema(self._parameter_schema)

    def get_result_set_schema(self):
        """Return the result set schema announced at creation or None"""
        self._check_closed()
        return read_schema(self._dataset_schema)

    def set_parameters(self, batch):
        """Bind parameters for the next execution
        :param batch: pyarrow.RecordBatch or pyarrow.Table with one column per parameter
        """
        self._check_closed()
        parameter_schema = self.get_parameter_schema()
        if parameter_schema is not None and not batch.schema.equals(parameter_schema, check_metadata=False):
            raise SchemaMismatchError("Parameters with schema %s do not match parameter schema %s" %
                                      (batch.schema, parameter_schema))
        self._parameters = batch

    @property
    def parameters(self):
        return self._parameters

    def execute(self, options=None):
        """Execute the prepared statement as query, pushing bound parameters first
        :returns: pyarrow.flight.FlightInfo
        """
        self._check_closed()
        options = self._call_options(options)
        command = commands.CommandPreparedStatementQuery(prepared_statement_handle=self.handle)
        if self._parameters is not None:
            debug('Binding %d parameter rows to %r', self._parameters.num_rows, self.handle)
            self._client._do_put_parameters(command, self._parameters, options)
        return self._client._get_flight_info(command, options)

    def execute_update(self, options=None):
        """Execute the prepared statement as update
        :returns: number of affected rows
        """
        self._check_closed()
        command = commands.CommandPreparedStatementUpdate(prepared_statement_handle=self.handle)
        return self._client._do_put_update(command, self._parameters, self._call_options(options))

    def close(self, options=None):
        """Close the statement on the server, the handle can not be used afterwards"""
        self._check_closed()
        self._client.close_prepared_statement(self.handle, self._call_options(options))
        self._closed = True
        self._parameters = None
