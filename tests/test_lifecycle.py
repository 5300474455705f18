# Copyright 2014, 2015 SAP SE.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http: //www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND,
# either express or implied. See the License for the specific
# language governing permissions and limitations under the License.

import threading

import pytest
###
from pyflightsql.lifecycle import HandleRegistry
from pyflightsql.exceptions import InvalidHandleError


@pytest.fixture
def registry():
    return HandleRegistry()


def test_create_returns_unique_bytes_handles(registry):
    first = registry.create('first')
    second = registry.create('second')

    assert isinstance(first, bytes)
    assert first != second
    assert registry.get(first) == 'first'
    assert registry.get(second) == 'second'
    assert len(registry) == 2


def test_handle_is_reusable_until_closed(registry):
    handle = registry.create('resource')
    assert registry.get(handle) == 'resource'
    assert registry.get(handle) == 'resource'
    assert handle in registry


def test_close_returns_resource_and_invalidates_handle(registry):
    handle = registry.create('resource')
    assert registry.close(handle) == 'resource'

    assert handle not in registry
    with pytest.raises(InvalidHandleError):
        registry.get(handle)
    with pytest.raises(InvalidHandleError):
        registry.close(handle)
    with pytest.raises(InvalidHandleError):
        registry.replace(handle, 'other')


def test_unknown_handle_raises(registry):
    with pytest.raises(InvalidHandleError):
        registry.get(b'never issued')


def test_replace(registry):
    handle = registry.create('resource')
    registry.replace(handle, 'bound resource')
    assert registry.get(handle) == 'bound resource'


def test_concurrent_create_and_close(registry):
    handles = []
    handles_lock = threading.Lock()
    errors = []

    def worker():
        try:
            for i in range(200):
                handle = registry.create(i)
                assert registry.get(handle) == i
                assert registry.close(handle) == i
            with handles_lock:
                handles.append(registry.create('kept'))
        except Exception as error:
            errors.append(error)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(registry) == 8
    assert len(set(handles)) == 8


def test_concurrent_close_of_same_handle_succeeds_once(registry):
    handle = registry.create('resource')
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        try:
            results.append(registry.close(handle))
        except InvalidHandleError:
            results.append(None)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count('resource') == 1
    assert results.count(None) == 7
