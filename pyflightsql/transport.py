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
import re
###
import pyarrow as pa
from pyarrow import flight
###
from pyflightsql.exceptions import OperationalError, ConnectionTimedOutError, NotSupportedError, by_status_code
from pyflightsql.protocol.constants import status_codes

logger = logging.getLogger('pyflightsql')
debug = logger.debug

STATUS_CODE_PATTERN = re.compile(r'\b(%s): ' % '|'.join(status_codes.ALL))


def error_from_message(message):
    """Rebuild a protocol error from the message of a transport failure
    :returns: a DatabaseError instance, or None if the message carries no protocol status code
    """
    match = STATUS_CODE_PATTERN.search(message)
    if match is None:
        return None
    code = match.group(1)
    return by_status_code(code)(message[match.end():].strip(), code)


@contextlib.contextmanager
def translated_errors():
    """Translate failures raised by pyarrow.flight into the exception hierarchy of this package"""
    try:
        yield
    except flight.FlightTimedOutError as error:
        raise ConnectionTimedOutError(str(error)) from error
    except flight.FlightUnavailableError as error:
        raise OperationalError("Flight server unavailable (%s)" % error) from error
    except (flight.FlightError, pa.ArrowException) as error:
        translated = error_from_message(str(error))
        if translated is not None:
            raise translated from error
        if isinstance(error, pa.ArrowNotImplementedError):
            raise NotSupportedError(str(error)) from error
        raise OperationalError(str(error)) from error


class Transport(object):
    """
    Abstract transport capability used by the client.
    Each call receives the opaque call options which are passed on unmodified.
    """

    def get_flight_info(self, descriptor, options=None):
        raise NotImplementedError()

    def get_schema(self, descriptor, options=None):
        raise NotImplementedError()

    def do_get(self, ticket, options=None):
        raise NotImplementedError()

    def do_put(self, descriptor, schema, options=None):
        """Start a push of record batches
        :returns: tuple (batch writer, metadata reader)
        """
        raise NotImplementedError()

    def do_action(self, action, options=None):
        """Invoke an action
        :returns: list of pyarrow.flight.Result instances
        """
        raise NotImplementedError()

    def list_actions(self, options=None):
        raise NotImplementedError()

    def close(self):
        raise NotImplementedError()


class FlightTransport(Transport):
    """Transport implementation on top of pyarrow.flight.FlightClient"""

    def __init__(self, client):
        self._client = client

    def __repr__(self):
        return '<FlightTransport client=%r>' % self._client

    def get_flight_info(self, descriptor, options=None):
        debug('GetFlightInfo (%d bytes command)', len(descriptor.command))
        with translated_errors():
            return self._client.get_flight_info(descriptor, options)

    def get_schema(self, descriptor, options=None):
        debug('GetSchema (%d bytes command)', len(descriptor.command))
        with translated_errors():
            return self._client.get_schema(descriptor, options)

    def do_get(self, ticket, options=None):
        debug('DoGet (%d bytes ticket)', len(ticket.ticket))
        with translated_errors():
            return self._client.do_get(ticket, options)

    def do_put(self, descriptor, schema, options=None):
        debug('DoPut (%d bytes command) with %d columns', len(descriptor.command), len(schema))
        with translated_errors():
            return self._client.do_put(descriptor, schema, options)

    def do_action(self, action, options=None):
        debug('DoAction %s', action.type)
        with translated_errors():
            # Drain the stream so that failures surface within this call
            return list(self._client.do_action(action, options))

    def list_actions(self, options=None):
        with translated_errors():
            return list(self._client.list_actions(options))

    def close(self):
        with translated_errors():
            self._client.close()
