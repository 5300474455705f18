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

from pyflightsql.exceptions import NotSupportedError


def _not_implemented(name):
    raise NotSupportedError("%s not implemented" % name)


class FlightSqlHandler(object):
    """
    Backend capability invoked by the server dispatcher.

    There is one method per entry point and command kind. Every default implementation
    raises NotSupportedError, so a backend only overrides the commands it supports:

    - get_flight_info_*(command, context, descriptor) return a pyarrow.flight.FlightInfo
    - do_get_*(command, context) return a pyarrow.flight.FlightDataStream (e.g. RecordBatchStream)
    - do_put_*(command, context, reader) consume the pushed batches, updates return the row count
    - create_prepared_statement(request, context) returns an ActionCreatePreparedStatementResult
    - close_prepared_statement(request, context) returns nothing
    """

    # GetFlightInfo

    def get_flight_info_statement(self, command, context, descriptor):
        _not_implemented('GetFlightInfoStatement')

    def get_flight_info_prepared_statement(self, command, context, descriptor):
        _not_implemented('GetFlightInfoPreparedStatement')

    def get_flight_info_catalogs(self, command, context, descriptor):
        _not_implemented('GetFlightInfoCatalogs')

    def get_flight_info_schemas(self, command, context, descriptor):
        _not_implemented('GetFlightInfoSchemas')

    def get_flight_info_tables(self, command, context, descriptor):
        _not_implemented('GetFlightInfoTables')

    def get_flight_info_table_types(self, command, context, descriptor):
        _not_implemented('GetFlightInfoTableTypes')

    def get_flight_info_sql_info(self, command, context, descriptor):
        _not_implemented('GetFlightInfoSqlInfo')

    def get_flight_info_primary_keys(self, command, context, descriptor):
        _not_implemented('GetFlightInfoPrimaryKeys')

    def get_flight_info_exported_keys(self, command, context, descriptor):
        _not_implemented('GetFlightInfoExportedKeys')

    def get_flight_info_imported_keys(self, command, context, descriptor):
        _not_implemented('GetFlightInfoImportedKeys')

    def get_flight_info_cross_reference(self, command, context, descriptor):
        _not_implemented('GetFlightInfoCrossReference')

    # GetSchema

    def get_schema_statement(self, command, context, descriptor):
        _not_implemented('GetSchemaStatement')

    # DoGet

    def do_get_statement(self, command, context):
        _not_implemented('DoGetStatement')

    def do_get_prepared_statement(self, command, context):
        _not_implemented('DoGetPreparedStatement')

    def do_get_catalogs(self, command, context):
        _not_implemented('DoGetCatalogs')

    def do_get_schemas(self, command, context):
        _not_implemented('DoGetSchemas')

    def do_get_tables(self, command, context):
        _not_implemented('DoGetTables')

    def do_get_table_types(self, command, context):
        _not_implemented('DoGetTableTypes')

    def do_get_sql_info(self, command, context):
        _not_implemented('DoGetSqlInfo')

    def do_get_primary_keys(self, command, context):
        _not_implemented('DoGetPrimaryKeys')

    def do_get_exported_keys(self, command, context):
        _not_implemented('DoGetExportedKeys')

    def do_get_imported_keys(self, command, context):
        _not_implemented('DoGetImportedKeys')

    def do_get_cross_reference(self, command, context):
        _not_implemented('DoGetCrossReference')

    # DoPut

    def do_put_statement_update(self, command, context, reader):
        _not_implemented('DoPutStatementUpdate')

    def do_put_prepared_statement_query(self, command, context, reader):
        _not_implemented('DoPutPreparedStatementQuery')

    def do_put_prepared_statement_update(self, command, context, reader):
        _not_implemented('DoPutPreparedStatementUpdate')

    # DoAction

    def create_prepared_statement(self, request, context):
        _not_implemented('CreatePreparedStatement')

    def close_prepared_statement(self, request, context):
        _not_implemented('ClosePreparedStatement')
