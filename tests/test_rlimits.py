"""Tests for the resource limit table."""

import os

import pytest

from hostfacts.backends.base import RLIM_MASK
from hostfacts.core.models import FIELD_NOTIMPL, ResourceLimit
from hostfacts.core.rlimits import (
    RLIMIT_TABLE,
    RLIMIT_UNSUPPORTED,
    RlimitFieldSpec,
    _setter,
    get_resource_limit,
)

from conftest import FakeBackend


def spec(name, resource_id):
    return RlimitFieldSpec(name, resource_id, _setter(name))


class TestTable:
    def test_one_row_per_limit(self):
        names = [row.name for row in RLIMIT_TABLE]
        assert names == [
            "cpu", "file_size", "data", "stack", "core",
            "memory", "processes", "open_files", "virtual_memory",
        ]

    def test_every_row_has_fields(self):
        limit = ResourceLimit()
        for row in RLIMIT_TABLE:
            assert hasattr(limit, f"{row.name}_cur")
            assert hasattr(limit, f"{row.name}_max")

    @pytest.mark.skipif(os.name != "posix", reason="POSIX resource ids")
    def test_posix_ids(self):
        import resource

        rows = {row.name: row.resource for row in RLIMIT_TABLE}
        assert rows["open_files"] == resource.RLIMIT_NOFILE
        assert rows["stack"] == resource.RLIMIT_STACK

    def test_setter(self):
        limit = ResourceLimit()
        spec("stack", 3).set(limit, 8192, 16384)
        assert limit.stack_cur == 8192
        assert limit.stack_max == 16384


class TestGetResourceLimit:
    def test_values_copied(self, make_context):
        backend = FakeBackend(limits={0: (60, 120), 7: (1024, 4096)})
        table = (spec("cpu", 0), spec("open_files", 7))

        limit = get_resource_limit(make_context(backend), table)

        assert (limit.cpu_cur, limit.cpu_max) == (60, 120)
        assert (limit.open_files_cur, limit.open_files_max) == (1024, 4096)
        assert limit.unlimited == 2 ** 64 - 1

    def test_unsupported_reports_notimpl_without_query(self, make_context):
        backend = FakeBackend(limits={0: (1, 2)})
        table = (spec("cpu", 0), spec("memory", RLIMIT_UNSUPPORTED))

        limit = get_resource_limit(make_context(backend), table)

        assert limit.memory_cur == FIELD_NOTIMPL
        assert limit.memory_max == FIELD_NOTIMPL
        assert backend.rlimit_calls == [0]

    def test_query_failure_reports_notimpl(self, make_context):
        backend = FakeBackend(limits={})
        limit = get_resource_limit(make_context(backend), (spec("core", 4),))
        assert limit.core_cur == FIELD_NOTIMPL
        assert limit.core_max == FIELD_NOTIMPL

    def test_unlimited_values_kept(self, make_context):
        infinity = 2 ** 64 - 1
        backend = FakeBackend(limits={4: (infinity, infinity)})
        limit = get_resource_limit(make_context(backend), (spec("core", 4),))
        assert limit.core_cur == limit.unlimited

    def test_rows_not_in_table_untouched(self, make_context):
        backend = FakeBackend(limits={0: (1, 2)})
        limit = get_resource_limit(make_context(backend), (spec("cpu", 0),))
        assert limit.stack_cur == FIELD_NOTIMPL

    @pytest.mark.skipif(os.name != "posix", reason="needs getrlimit")
    def test_real_backend_limits(self):
        import resource

        from hostfacts.context import HostContext

        with HostContext() as context:
            limit = context.resource_limit()

        cur, max_ = (v & RLIM_MASK for v in resource.getrlimit(resource.RLIMIT_NOFILE))
        assert limit.open_files_cur == cur
        assert limit.open_files_max == max_
        assert limit.unlimited == resource.RLIM_INFINITY & RLIM_MASK
        assert limit.unlimited != FIELD_NOTIMPL
