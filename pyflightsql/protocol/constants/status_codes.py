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

# Protocol status codes

# These values prefix error messages sent by a server so that clients can
# restore the original error class

INVALID_REQUEST = 'INVALID_REQUEST'
MALFORMED = 'MALFORMED'
NOT_IMPLEMENTED = 'NOT_IMPLEMENTED'
INVALID_HANDLE = 'INVALID_HANDLE'
SCHEMA_MISMATCH = 'SCHEMA_MISMATCH'

ALL = (INVALID_REQUEST, MALFORMED, NOT_IMPLEMENTED, INVALID_HANDLE, SCHEMA_MISMATCH)
