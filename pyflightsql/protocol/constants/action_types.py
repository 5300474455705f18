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

# Action types

# Literal values of Action.type, also returned by ListActions

CREATE_PREPARED_STATEMENT = 'CreatePreparedStatement'
CLOSE_PREPARED_STATEMENT = 'ClosePreparedStatement'

DESCRIPTIONS = {
    CREATE_PREPARED_STATEMENT: 'Creates a reusable prepared statement resource on the server.\n'
                               'Request Message: ActionCreatePreparedStatementRequest\n'
                               'Response Message: ActionCreatePreparedStatementResult',
    CLOSE_PREPARED_STATEMENT: 'Closes a reusable prepared statement resource on the server.\n'
                              'Request Message: ActionClosePreparedStatementRequest\n'
                              'Response Message: N/A',
}
