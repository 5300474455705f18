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

import logging
import threading
import uuid
###
from pyflightsql.exceptions import InvalidHandleError

logger = logging.getLogger('pyflightsql')
debug = logger.debug


class HandleRegistry(object):
    """
    Server side store of prepared statement resources keyed by their handle.
    A handle is valid from create() until close(), afterwards every lookup fails with InvalidHandleError.
    All methods may be called concurrently from the threads of the flight server.
    """
    def __init__(self):
        self._resources = {}
        self._lock = threading.Lock()

    def __repr__(self):
        return '<HandleRegistry %d open handles>' % len(self)

    def __len__(self):
        with self._lock:
            return len(self._resources)

    def __contains__(self, handle):
        with self._lock:
            return handle in self._resources

    @staticmethod
    def new_handle():
        return uuid.uuid4().hex.encode('ascii')

    def create(self, resource):
        """Register a new resource
        :returns: the new handle as bytes
        """
        handle = self.new_handle()
        with self._lock:
            self._resources[handle] = resource
        debug('Created handle %r', handle)
        return handle

    def get(self, handle):
        with self._lock:
            try:
                return self._resources[handle]
            except KeyError:
                raise InvalidHandleError("Unknown prepared statement handle %r" % (handle,))

    def replace(self, handle, resource):
        """Replace the resource of a valid handle, e.g. after binding parameters"""
        with self._lock:
            if handle not in self._resources:
                raise InvalidHandleError("Unknown prepared statement handle %r" % (handle,))
            self._resources[handle] = resource

    def close(self, handle):
        """Invalidate handle
        :returns: the resource which was registered for the handle
        """
        with self._lock:
            try:
                resource = self._resources.pop(handle)
            except KeyError:
                raise InvalidHandleError("Unknown prepared statement handle %r" % (handle,))
        debug('Closed handle %r', handle)
        return resource
