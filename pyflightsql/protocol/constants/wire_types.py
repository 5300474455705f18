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

# Protocol buffers wire types

# Lower three bits of every field key

VARINT = 0            # int32, int64, uint32, uint64, bool, enum
I64 = 1               # fixed64, sfixed64, double
LEN = 2               # string, bytes, embedded messages, packed repeated fields
I32 = 5               # fixed32, sfixed32, float

MAX_VARINT_SIZE = 10  # bytes needed for a negative 64 bit value
