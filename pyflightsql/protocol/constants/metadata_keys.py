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

# Column metadata keys

# Auxiliary key/value metadata attached to single result set columns

CATALOG_NAME = 'CATALOG_NAME'
SCHEMA_NAME = 'SCHEMA_NAME'
TABLE_NAME = 'TABLE_NAME'
PRECISION = 'PRECISION'
SCALE = 'SCALE'
IS_AUTO_INCREMENT = 'IS_AUTO_INCREMENT'
IS_CASE_SENSITIVE = 'IS_CASE_SENSITIVE'
IS_READ_ONLY = 'IS_READ_ONLY'
IS_SEARCHABLE = 'IS_SEARCHABLE'

BOOLEAN_TRUE = 'YES'
BOOLEAN_FALSE = 'NO'
