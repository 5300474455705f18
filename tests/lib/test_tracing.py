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
import pyflightsql
from pyflightsql.protocol.envelope import Envelope
from pyflightsql.protocol.commands import CommandStatementQuery, CommandGetTables, CommandPreparedStatementQuery
from pyflightsql.lib.tracing import trace

TRACE_ENVELOPE = '''Envelope = {
    type_url = 'type.googleapis.com/arrow.flight.protocol.sql.CommandStatementQuery',
    payload = <0a 08 73 65 6c 65 63 74 20 31>
}'''

TRACE_COMMAND = '''CommandGetTables = {
    catalog = None,
    schema_filter_pattern = None,
    table_name_filter_pattern = 'int%',
    table_types = [
        'table',
        'view'
    ],
    include_schema = True
}'''


@pytest.fixture
def tracing(request):
    pyflightsql.tracing = True

    def _reset():
        pyflightsql.tracing = False

    request.addfinalizer(_reset)


def test_tracing_output_of_envelope(tracing):
    envelope = Envelope.wrap(CommandStatementQuery('select 1'))
    assert trace(envelope) == TRACE_ENVELOPE


def test_tracing_output_of_command(tracing):
    command = CommandGetTables(table_name_filter_pattern='int%', table_types=['table', 'view'], include_schema=True)
    assert trace(command) == TRACE_COMMAND


def test_tracing_shortens_binary_attributes(tracing):
    command = CommandPreparedStatementQuery(prepared_statement_handle=b'\x00' * 40)
    trace_msg = trace(command)
    assert trace_msg.splitlines()[1] == '    prepared_statement_handle = <%s ...>' % ' '.join(['00'] * 32)


def test_tracing_is_disabled_by_default():
    assert trace(CommandStatementQuery('select 1')) is None
