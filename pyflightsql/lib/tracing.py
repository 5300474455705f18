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
import io
import pyflightsql
from pyflightsql.lib.stringlib import humanhexlify

# Number of payload bytes shown for binary attributes
BINARY_TRACE_LENGTH = 32


def trace(trace_obj):
    """Print recursive trace of given protocol object
    :param trace_obj: either an envelope or a command object
    """
    if pyflightsql.tracing:
        t = TraceLogger()
        tr = t.trace(trace_obj)
        print(tr)
        return tr


class TraceLogger(object):
    """Trace logger class for dumping type tags, fields and binary payloads of envelopes and commands"""
    _indent_incr = 4

    def __init__(self):
        self._indent_level = 0
        self._indent_level_is_first = {0: True}
        self._buffer = io.StringIO()

    def trace(self, trace_obj):
        """
        Trace given trace_obj (usually an Envelope instance) recursively.
        :param trace_obj:
        :return: a string with properly formatted tracing information
        """
        tracer = self
        tracer.writeln('%s = ' % trace_obj.__class__.__name__)
        tracer.incr('{')
        for attr_name in trace_obj.__tracing_attrs__:
            attr = getattr(trace_obj, attr_name)
            if hasattr(attr, '__tracing_attrs__'):
                tracer.writeln('%s = ' % (attr_name,))
                tracer.incr('[')
                self.trace(attr)
                tracer.decr(']')
            elif isinstance(attr, (bytes, bytearray)):
                tracer.writeln('%s = <%s>' % (attr_name, humanhexlify(attr, BINARY_TRACE_LENGTH).decode('ascii')))
            elif isinstance(attr, (list, tuple)):
                if attr:
                    tracer.writeln('%s = ' % (attr_name,))
                    tracer.incr('[')
                    for elem in attr:
                        if hasattr(elem, '__tracing_attrs__'):
                            self.trace(elem)
                        else:
                            # some other plain list element, just print it as it is:
                            tracer.writeln('%s' % repr(elem))
                    tracer.decr(']')
                else:
                    tracer.writeln('%s = []' % (attr_name,))
            else:
                # a plain attribute object, just print it as it is
                tracer.writeln('%s = %s' % (attr_name, repr(attr)))
        tracer.decr('}')
        return self.getvalue()

    def incr(self, brace):
        self._buffer.write('%s\n' % brace)
        self._indent_level += self._indent_incr
        self._indent_level_is_first[self._indent_level] = True

    def decr(self, brace):
        assert self._indent_level > 0, 'Indentation level cannot be decremented any further'
        self._buffer.write('\n')
        self._indent_level -= self._indent_incr
        self._buffer.write(' ' * self._indent_level)
        self._buffer.write('%s' % brace)

    def writeln(self, line):
        if self._indent_level_is_first[self._indent_level]:
            self._indent_level_is_first[self._indent_level] = False
        else:
            self._buffer.write(',\n')

        self._buffer.write(' ' * self._indent_level)
        self._buffer.write(line)

    def getvalue(self):
        return self._buffer.getvalue()
