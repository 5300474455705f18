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

# SQL info codes

# Values requested through CommandGetSqlInfo

# Server information [0-500)
FLIGHT_SQL_SERVER_NAME = 0            # Name of the Flight SQL server
FLIGHT_SQL_SERVER_VERSION = 1         # Native version of the Flight SQL server
FLIGHT_SQL_SERVER_ARROW_VERSION = 2   # Arrow format version of the Flight SQL server
FLIGHT_SQL_SERVER_READ_ONLY = 3       # Whether the server is read only

# SQL syntax information [500-1000)
SQL_DDL_CATALOG = 500                 # Whether catalogs can be created and removed
SQL_DDL_SCHEMA = 501                  # Whether schemas can be created and removed
SQL_DDL_TABLE = 502                   # Whether tables can be created and removed
SQL_IDENTIFIER_CASE = 503             # Case sensitivity of unquoted identifiers
SQL_IDENTIFIER_QUOTE_CHAR = 504       # Character used to quote identifiers
SQL_QUOTED_IDENTIFIER_CASE = 505      # Case sensitivity of quoted identifiers

ALL = (
    FLIGHT_SQL_SERVER_NAME, FLIGHT_SQL_SERVER_VERSION, FLIGHT_SQL_SERVER_ARROW_VERSION, FLIGHT_SQL_SERVER_READ_ONLY,
    SQL_DDL_CATALOG, SQL_DDL_SCHEMA, SQL_DDL_TABLE,
    SQL_IDENTIFIER_CASE, SQL_IDENTIFIER_QUOTE_CHAR, SQL_QUOTED_IDENTIFIER_CASE,
)
