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

import os
import configparser

tracing = os.environ.get('FLIGHTSQL_TRACE', 'FALSE').upper() in ('TRUE', '1')

from pyarrow import flight
from pyflightsql.exceptions import *
from pyflightsql.client import FlightSqlClient
from pyflightsql.statement import PreparedStatement
from pyflightsql.transport import Transport, FlightTransport
from pyflightsql.column_metadata import ColumnMetadata


def connect(host, port, tls=False, timeout=None):
    """Connect to a flight sql server
    :param host: host name or address of the server
    :param port: port of the server
    :param tls: use a TLS secured channel
    :param timeout: default timeout in seconds for every call
    :returns: FlightSqlClient instance
    """
    scheme = 'grpc+tls' if tls else 'grpc'
    client = flight.FlightClient('%s://%s:%s' % (scheme, host, port))
    return FlightSqlClient(FlightTransport(client), timeout=timeout)


def _to_bool(value):
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def from_ini(ini_file, section=None):
    """
    Connect to a flight sql server by reading connection parameters from an ini file.
    :param ini_file: Name of ini file, e.g. 'pytest.ini'
    :param section: specify alternative section in ini file. Section 'flightsql' and 'pytest' will be searched by default
    :return: FlightSqlClient instance

    Example:
        [pytest]
        flightsql_host = localhost
        flightsql_port = 31337
        flightsql_tls = false
        flightsql_timeout = 10

    A 'flightsql_' prefix is allowed, but will be removed automatically.
    """
    if not os.path.exists(ini_file):
        raise RuntimeError('Could not find ini file %s' % ini_file)
    cp = configparser.ConfigParser()
    cp.read(ini_file)
    if not cp.sections():
        raise RuntimeError('Could not find any section in ini file %s' % ini_file)
    if section:
        sec_list = [section]
    elif len(cp.sections()) == 1:
        # no section specified - check if there is a single/unique section in the ini file:
        sec_list = cp.sections()
    else:
        # ini_file has more than one section, so try some default names:
        sec_list = ['flightsql', 'pytest']

    for sec in sec_list:
        try:
            param_values = cp.items(sec)
        except configparser.NoSectionError:
            continue
        params = dict(param_values)
        break
    else:
        raise RuntimeError('Could not guess which section to use for flight sql parameters from %s' % ini_file)

    # Parameters can be named like 'flightsql_host' (e.g. pytest.ini) or just 'host' (other ini's).
    # Remove the prefix so that parameter names match the arguments of the pyflightsql.connect() function.
    # Also remove invalid keys from clean_params.

    def rm_prefix(param):
        return param[len('flightsql_'):] if param.startswith('flightsql_') else param

    valid_keys = ('host', 'port', 'tls', 'timeout')
    clean_params = {rm_prefix(key): val for key, val in params.items() if rm_prefix(key) in valid_keys}
    if 'port' in clean_params:
        clean_params['port'] = int(clean_params['port'])
    if 'tls' in clean_params:
        clean_params['tls'] = _to_bool(clean_params['tls'])
    if 'timeout' in clean_params:
        clean_params['timeout'] = float(clean_params['timeout'])

    # make actual connection:
    return connect(**clean_params)


# Add from_ini() as attribute to the connect method, so to use it do: pyflightsql.connect.from_ini(ini_file)
connect.from_ini = from_ini
# ... and cleanup the local namespace:
del from_ini
