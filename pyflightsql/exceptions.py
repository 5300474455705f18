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

from pyflightsql.protocol.constants import status_codes


class Error(Exception):
    pass


class InterfaceError(Error):
    pass


class DatabaseError(Error):

    status_code = None

    def __init__(self, message, code=None):
        super(DatabaseError, self).__init__(message)
        self.code = code if code is not None else self.status_code


class InternalError(DatabaseError):
    pass


class OperationalError(DatabaseError):
    pass


class ConnectionTimedOutError(OperationalError):

    def __init__(self, message=None):
        super(ConnectionTimedOutError, self).__init__(message)


class ProgrammingError(DatabaseError):
    pass


class DataError(DatabaseError):
    pass


class NotSupportedError(DatabaseError):
    """Raised for a valid command which the serving backend does not implement"""
    status_code = status_codes.NOT_IMPLEMENTED


class InvalidRequestError(ProgrammingError):
    """Unknown command or action type encountered at a dispatch boundary"""
    status_code = status_codes.INVALID_REQUEST


class InvalidHandleError(ProgrammingError):
    """Operation addressed to a closed or never issued prepared statement handle"""
    status_code = status_codes.INVALID_HANDLE


class MalformedError(DataError):
    """Envelope or payload can not be parsed against its declared type"""
    status_code = status_codes.MALFORMED


class SchemaMismatchError(DataError):
    """Bound parameters do not match the parameter schema of a prepared statement"""
    status_code = status_codes.SCHEMA_MISMATCH


STATUS_CODE_MAPPING = {
    cls.status_code: cls for cls in (
        NotSupportedError, InvalidRequestError, InvalidHandleError, MalformedError, SchemaMismatchError
    )
}


def by_status_code(code):
    """Return the exception class for a protocol status code
    :param code: one of the strings in protocol.constants.status_codes
    :returns: an exception class, DatabaseError for unknown codes
    """
    return STATUS_CODE_MAPPING.get(code, DatabaseError)
