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

from pyflightsql.exceptions import DataError
from pyflightsql.protocol.constants import metadata_keys

STRING_KEYS = (metadata_keys.CATALOG_NAME, metadata_keys.SCHEMA_NAME, metadata_keys.TABLE_NAME)
INTEGER_KEYS = (metadata_keys.PRECISION, metadata_keys.SCALE)
BOOLEAN_KEYS = (metadata_keys.IS_AUTO_INCREMENT, metadata_keys.IS_CASE_SENSITIVE,
                metadata_keys.IS_READ_ONLY, metadata_keys.IS_SEARCHABLE)


def boolean_to_string(value):
    return metadata_keys.BOOLEAN_TRUE if value else metadata_keys.BOOLEAN_FALSE


def string_to_boolean(value):
    if value == metadata_keys.BOOLEAN_TRUE:
        return True
    elif value == metadata_keys.BOOLEAN_FALSE:
        return False
    raise DataError("Invalid boolean column metadata value %r" % value)


class ColumnMetadata(object):
    """Auxiliary key/value metadata of a single result set column

    Usage:
    >>> field = pa.field('id', pa.int64())
    >>> field = field.with_metadata(ColumnMetadata(table_name='intTable', is_read_only=False).metadata)
    >>> ColumnMetadata.from_field(field).table_name
    'intTable'
    """

    def __init__(self, catalog_name=None, schema_name=None, table_name=None, precision=None, scale=None,
                 is_auto_increment=None, is_case_sensitive=None, is_read_only=None, is_searchable=None):
        self._values = {}
        for key, value in (
            (metadata_keys.CATALOG_NAME, catalog_name),
            (metadata_keys.SCHEMA_NAME, schema_name),
            (metadata_keys.TABLE_NAME, table_name),
            (metadata_keys.PRECISION, precision),
            (metadata_keys.SCALE, scale),
            (metadata_keys.IS_AUTO_INCREMENT, is_auto_increment),
            (metadata_keys.IS_CASE_SENSITIVE, is_case_sensitive),
            (metadata_keys.IS_READ_ONLY, is_read_only),
            (metadata_keys.IS_SEARCHABLE, is_searchable),
        ):
            if value is None:
                continue
            if key in BOOLEAN_KEYS:
                self._values[key] = boolean_to_string(value)
            else:
                self._values[key] = str(value)

    @classmethod
    def from_metadata(cls, metadata):
        """Create instance from a key/value mapping, unknown keys are ignored
        :param metadata: dict with str or bytes keys and values (as returned by pyarrow)
        """
        column_metadata = cls()
        for key, value in (metadata or {}).items():
            if isinstance(key, bytes):
                key = key.decode('utf-8')
            if isinstance(value, bytes):
                value = value.decode('utf-8')
            if key in STRING_KEYS + INTEGER_KEYS + BOOLEAN_KEYS:
                column_metadata._values[key] = value
        return column_metadata

    @classmethod
    def from_field(cls, field):
        return cls.from_metadata(field.metadata)

    @property
    def metadata(self):
        """Return a dict suited for pyarrow.Field.with_metadata()"""
        return dict(self._values)

    def _get_string(self, key):
        return self._values.get(key)

    def _get_integer(self, key):
        value = self._values.get(key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise DataError("Invalid integer column metadata value %r for %s" % (value, key))

    def _get_boolean(self, key):
        value = self._values.get(key)
        return None if value is None else string_to_boolean(value)

    @property
    def catalog_name(self):
        return self._get_string(metadata_keys.CATALOG_NAME)

    @property
    def schema_name(self):
        return self._get_string(metadata_keys.SCHEMA_NAME)

    @property
    def table_name(self):
        return self._get_string(metadata_keys.TABLE_NAME)

    @property
    def precision(self):
        return self._get_integer(metadata_keys.PRECISION)

    @property
    def scale(self):
        return self._get_integer(metadata_keys.SCALE)

    @property
    def is_auto_increment(self):
        return self._get_boolean(metadata_keys.IS_AUTO_INCREMENT)

    @property
    def is_case_sensitive(self):
        return self._get_boolean(metadata_keys.IS_CASE_SENSITIVE)

    @property
    def is_read_only(self):
        return self._get_boolean(metadata_keys.IS_READ_ONLY)

    @property
    def is_searchable(self):
        return self._get_boolean(metadata_keys.IS_SEARCHABLE)

    def __eq__(self, other):
        if not isinstance(other, ColumnMetadata):
            return NotImplemented
        return self._values == other._values

    __hash__ = None

    def __repr__(self):
        return '<ColumnMetadata %r>' % self._values
