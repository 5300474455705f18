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
import mock
import pyarrow as pa
###
from pyflightsql.statement import PreparedStatement
from pyflightsql.protocol import commands
from pyflightsql.exceptions import InvalidHandleError, SchemaMismatchError

PARAMETER_SCHEMA = pa.schema([pa.field('id', pa.int64())])


@pytest.fixture
def sql_client():
    return mock.Mock()


@pytest.fixture
def statement(sql_client):
    return PreparedStatement(sql_client, b'handle', parameter_schema=PARAMETER_SCHEMA.serialize().to_pybytes())


def test_repr(statement):
    assert repr(statement) == "<PreparedStatement handle=b'handle'>"


def test_execute_twice_uses_same_handle(statement, sql_client):
    statement.execute()
    statement.execute()

    assert sql_client._get_flight_info.call_count == 2
    expected = commands.CommandPreparedStatementQuery(prepared_statement_handle=b'handle')
    for call in sql_client._get_flight_info.call_args_list:
        assert call[0][0] == expected


def test_closed_statement_raises_invalid_handle(statement, sql_client):
    statement.close()
    sql_client.close_prepared_statement.assert_called_once_with(b'handle', None)
    assert statement.closed

    with pytest.raises(InvalidHandleError):
        statement.execute()
    with pytest.raises(InvalidHandleError):
        statement.execute_update()
    with pytest.raises(InvalidHandleError):
        statement.set_parameters(pa.record_batch([pa.array([1])], names=['id']))
    with pytest.raises(InvalidHandleError):
        statement.get_parameter_schema()
    with pytest.raises(InvalidHandleError):
        statement.close()
    assert not sql_client._get_flight_info.called
    assert sql_client.close_prepared_statement.call_count == 1


def test_context_manager_closes_once(statement, sql_client):
    with statement:
        pass
    assert statement.closed

    with statement:
        pass
    assert sql_client.close_prepared_statement.call_count == 1


def test_failed_close_leaves_statement_open(statement, sql_client):
    sql_client.close_prepared_statement.side_effect = RuntimeError('unavailable')
    with pytest.raises(RuntimeError):
        statement.close()
    assert not statement.closed


def test_set_parameters_with_matching_schema(statement):
    batch = pa.record_batch([pa.array([1], type=pa.int64())], schema=PARAMETER_SCHEMA)
    statement.set_parameters(batch)
    assert statement.parameters is batch


def test_set_parameters_with_mismatching_schema_raises(statement, sql_client):
    batch = pa.record_batch([pa.array(['1'])], names=['id'])
    with pytest.raises(SchemaMismatchError):
        statement.set_parameters(batch)

    assert statement.parameters is None
    statement.execute()
    assert not sql_client._do_put_parameters.called


def test_set_parameters_without_parameter_schema(sql_client):
    statement = PreparedStatement(sql_client, b'handle')
    batch = pa.record_batch([pa.array(['x']), pa.array([1])], names=['a', 'b'])
    statement.set_parameters(batch)

    assert statement.get_parameter_schema() is None
    statement.execute()
    sql_client._do_put_parameters.assert_called_once_with(
        commands.CommandPreparedStatementQuery(prepared_statement_handle=b'handle'), batch, None
    )


def test_parameters_are_pushed_before_each_execution(statement, sql_client):
    batch = pa.record_batch([pa.array([1], type=pa.int64())], schema=PARAMETER_SCHEMA)
    statement.set_parameters(batch)

    statement.execute()
    statement.execute()

    names = [c[0] for c in sql_client.method_calls]
    assert names == ['_do_put_parameters', '_get_flight_info', '_do_put_parameters', '_get_flight_info']


def test_execute_update_sends_bound_parameters(statement, sql_client):
    sql_client._do_put_update.return_value = 3
    batch = pa.record_batch([pa.array([1, 2, 3], type=pa.int64())], schema=PARAMETER_SCHEMA)
    statement.set_parameters(batch)

    assert statement.execute_update() == 3
    sql_client._do_put_update.assert_called_once_with(
        commands.CommandPreparedStatementUpdate(prepared_statement_handle=b'handle'), batch, None
    )


def test_statement_options_are_default_for_all_calls(sql_client):
    options = object()
    statement = PreparedStatement(sql_client, b'handle', options=options)
    statement.execute()
    assert sql_client._get_flight_info.call_args[0][1] is options
