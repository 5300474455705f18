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

import pyflightsql
from pyflightsql.client import FlightSqlClient
from pyflightsql.transport import Transport
from pyflightsql.example.sqlite_server import SqliteFlightSqlHandler
from pyflightsql.server import FlightSqlServer


@pytest.fixture
def transport():
    """Substitute transport recording all calls of the client"""
    transport = mock.Mock(spec=Transport)
    writer, reader = mock.Mock(), mock.Mock()
    reader.read.return_value = None
    transport.do_put.return_value = (writer, reader)
    transport.do_action.return_value = []
    return transport


@pytest.fixture
def client(transport):
    return FlightSqlClient(transport)


@pytest.fixture
def sqlite_handler(request):
    handler = SqliteFlightSqlHandler()
    request.addfinalizer(handler.close)
    return handler


@pytest.fixture
def server(request, sqlite_handler):
    """In-process flight sql server with the sqlite example backend on a random local port"""
    server = FlightSqlServer(sqlite_handler, 'grpc://127.0.0.1:0')

    def _shutdown():
        server.shutdown()
        server.wait()

    request.addfinalizer(_shutdown)
    return server


@pytest.fixture
def connection(request, server):
    connection = pyflightsql.connect('127.0.0.1', server.port, timeout=10)

    def _close():
        if not connection.closed:
            connection.close()

    request.addfinalizer(_close)
    return connection


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "servertest: mark test to run only with an in-process flight sql server"
    )


def pytest_addoption(parser):
    parser.addoption(
        "--no-server",
        action="store_true",
        help="Specify this option to omit all tests starting a flight sql server"
    )


def pytest_report_header(config):
    return [
        "pyarrow %s" % pa.__version__,
    ]


def pytest_runtest_setup(item):
    server_marker = item.get_closest_marker("servertest")

    if server_marker is not None and item.config.getoption("--no-server"):
        pytest.skip("Test requires a flight sql server and is omitted due to command line option")
