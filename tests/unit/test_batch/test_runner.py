# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch behaviour: per-host isolation, ordering, confirmation and release."""
from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from remotereg.batch.options import RegistryOptions
from remotereg.batch.runner import BatchRunner, HostState, Operation
from remotereg.core.exceptions import InvalidArgument, SessionClosed
from remotereg.registry.kinds import AccessMode, ValueKind

KEY = r"SOFTWARE\Vendor\App"
REG_DWORD = 4


@pytest.fixture
def abc_hosts(fake_winreg):
    """A has the value, B is unreachable by probe, C lacks the key."""
    fake_winreg.put("A", KEY, "Port", 3389, REG_DWORD)
    fake_winreg.put("B", KEY, "Port", 1, REG_DWORD)
    fake_winreg.add_host("C")
    return ["A", "B", "C"]


def _probe(down):
    return lambda host: host not in down


@pytest.mark.unit
class TestPartialFailure:
    def test_abc_scenario(self, transport, abc_hosts):
        runner = BatchRunner(transport, options=RegistryOptions(ping=True), probe=_probe({"B"}))

        batch = runner.get_value(abc_hosts, KEY, "Port")

        assert [o.host for o in batch.outcomes] == ["A", "B", "C"]
        assert [o.state for o in batch.outcomes] == [HostState.SUCCEEDED, HostState.SKIPPED, HostState.FAILED]
        assert batch.outcomes[2].error_kind == "KeyNotFound"
        assert [r.computer_name for r in batch.results] == ["A"]
        assert batch.results[0].data == 3389
        assert not batch.ok

    def test_abc_scenario_parallel(self, transport, abc_hosts):
        options = RegistryOptions(ping=True, max_workers=3)
        runner = BatchRunner(transport, options=options, probe=_probe({"B"}))

        batch = runner.get_value(abc_hosts, KEY, "Port")

        assert [o.host for o in batch.outcomes] == ["A", "B", "C"]
        assert [o.state for o in batch.outcomes] == [HostState.SUCCEEDED, HostState.SKIPPED, HostState.FAILED]

    def test_probe_not_used_without_ping(self, transport, abc_hosts):
        probe = Mock(return_value=False)
        runner = BatchRunner(transport, probe=probe)

        batch = runner.get_value(abc_hosts, KEY, "Port")

        probe.assert_not_called()
        assert [o.state for o in batch.outcomes] == [HostState.SUCCEEDED, HostState.SUCCEEDED, HostState.FAILED]

    def test_connection_failure_recorded(self, fake_winreg, transport):
        fake_winreg.put("A", KEY, "Port", 1, REG_DWORD)

        batch = BatchRunner(transport).get_value(["ghost", "A"], KEY, "Port")

        assert batch.outcomes[0].state is HostState.FAILED
        assert batch.outcomes[0].error_kind == "ConnectionError"
        assert batch.outcomes[1].state is HostState.SUCCEEDED

    def test_missing_value_recorded(self, fake_winreg, transport):
        fake_winreg.add_key("A", KEY)

        batch = BatchRunner(transport).get_value(["A"], KEY, "Port")

        assert batch.failures[0].error_kind == "ValueNotFound"

    def test_unexpected_error_isolated(self, fake_winreg, transport):
        fake_winreg.add_key("A", KEY)
        fake_winreg.add_key("B", KEY)

        def boom(acc, handle):
            if handle.host == "A":
                raise RuntimeError("bad")
            return None

        batch = BatchRunner(transport).run(["A", "B"], Operation(name="custom", key=KEY, invoke=boom))

        assert batch.outcomes[0].error_kind == "RuntimeError"
        assert batch.outcomes[1].state is HostState.SUCCEEDED

    def test_empty_host_list_means_local(self, fake_winreg, transport):
        fake_winreg.put("LOCALBOX", KEY, "Port", 5, REG_DWORD)

        batch = BatchRunner(transport).get_value([], KEY, "Port")

        assert [r.computer_name for r in batch.results] == ["LOCALBOX"]

    def test_connect_attempts(self, fake_winreg, transport, monkeypatch):
        monkeypatch.setattr("remotereg.core.retry.time.sleep", lambda s: None)
        fake_winreg.add_host("A")
        fake_winreg.unreachable.add("a")

        BatchRunner(transport, options=RegistryOptions(connect_attempts=3)).get_value(["A"], KEY, "Port")

        assert len(fake_winreg.connect_calls) == 3


@pytest.mark.unit
class TestWrites:
    def test_invalid_argument_before_any_host(self, fake_winreg, transport, abc_hosts):
        runner = BatchRunner(transport, options=RegistryOptions(force=True))

        with pytest.raises(InvalidArgument):
            runner.set_value(abc_hosts, KEY, "Items", [], ValueKind.MULTI_STRING)

        assert fake_winreg.platform_calls == []

    def test_set_with_force(self, fake_winreg, transport, abc_hosts):
        runner = BatchRunner(transport, options=RegistryOptions(force=True, passthru=True))

        batch = runner.set_value(["A"], KEY, "Port", 3390, ValueKind.DWORD)

        assert batch.results[0].data == 3390
        assert fake_winreg.stored("A", KEY, "Port") == (3390, REG_DWORD)

    def test_set_without_passthru_emits_nothing(self, transport, abc_hosts):
        batch = BatchRunner(transport, options=RegistryOptions(force=True)).set_value(["A"], KEY, "Port", 1, "dword")

        assert batch.outcomes[0].state is HostState.SUCCEEDED
        assert batch.results == []

    def test_not_confirmed_is_skipped(self, fake_winreg, transport, abc_hosts):
        batch = BatchRunner(transport).set_value(["A"], KEY, "Port", 1, ValueKind.DWORD)

        assert batch.outcomes[0].state is HostState.SKIPPED
        assert fake_winreg.stored("A", KEY, "Port") == (3389, REG_DWORD)
        assert fake_winreg.open_handles == []

    def test_confirm_per_host(self, fake_winreg, transport):
        fake_winreg.put("A", KEY, "Port", 1, REG_DWORD)
        fake_winreg.put("D", KEY, "Port", 1, REG_DWORD)
        confirm = Mock(side_effect=lambda host, desc: host == "D")

        batch = BatchRunner(transport, confirm=confirm).remove_value(["A", "D"], KEY, "Port")

        assert [o.state for o in batch.outcomes] == [HostState.SKIPPED, HostState.SUCCEEDED]
        assert confirm.call_count == 2
        assert "Remove value 'Port'" in confirm.call_args.args[1]
        assert fake_winreg.stored("A", KEY, "Port") is not None
        assert fake_winreg.stored("D", KEY, "Port") is None

    def test_confirm_not_asked_for_reads(self, transport, abc_hosts):
        confirm = Mock(return_value=False)

        BatchRunner(transport, confirm=confirm).get_value(["A"], KEY, "Port")

        confirm.assert_not_called()

    def test_confirm_not_asked_when_key_missing(self, transport, abc_hosts):
        confirm = Mock(return_value=True)

        batch = BatchRunner(transport, confirm=confirm).set_value(["C"], KEY, "Port", 1, ValueKind.DWORD)

        confirm.assert_not_called()
        assert batch.outcomes[0].error_kind == "KeyNotFound"

    def test_handles_released_after_write_error(self, fake_winreg, transport, abc_hosts):
        fake_winreg.reject_writes.add("a")
        runner = BatchRunner(transport, options=RegistryOptions(force=True))

        batch = runner.set_value(["A"], KEY, "Port", 1, ValueKind.DWORD)

        assert batch.outcomes[0].error_kind == "WriteError"
        assert fake_winreg.open_handles == []

        fake_winreg.reject_writes.clear()
        again = runner.set_value(["A"], KEY, "Port", 1, ValueKind.DWORD)
        assert again.outcomes[0].state is HostState.SUCCEEDED
        assert fake_winreg.open_handles == []

    def test_set_default(self, fake_winreg, transport, abc_hosts):
        batch = BatchRunner(transport, options=RegistryOptions(force=True)).set_default(["A"], KEY, "hello")

        assert batch.ok
        assert fake_winreg.stored("A", KEY, "") == ("hello", 1)

    def test_remove_missing_value(self, transport, abc_hosts):
        batch = BatchRunner(transport, options=RegistryOptions(force=True)).remove_value(["A"], KEY, "Nope")

        assert batch.outcomes[0].error_kind == "ValueNotFound"


@pytest.mark.unit
class TestReads:
    def test_test_value(self, transport, abc_hosts):
        batch = BatchRunner(transport).test_value(["A", "C"], KEY, "Port")

        assert batch.outcomes[0].value is True
        assert batch.outcomes[1].state is HostState.FAILED
        assert batch.results == []

    def test_test_value_absent(self, transport, abc_hosts):
        assert BatchRunner(transport).test_value(["A"], KEY, "Nope").outcomes[0].value is False

    def test_list_and_default(self, fake_winreg, transport, abc_hosts):
        fake_winreg.put("A", KEY, "", "dflt", 1)
        runner = BatchRunner(transport)

        assert sorted(r.value for r in runner.list_values(["A"], KEY).results) == ["(default)", "Port"]
        assert runner.get_default(["A"], KEY).results[0].data == "dflt"

    def test_expand_option(self, fake_winreg, transport):
        fake_winreg.put("A", KEY, "Dir", "%SystemRoot%\\Temp", 2)

        plain = BatchRunner(transport).get_value(["A"], KEY, "Dir")
        expanded = BatchRunner(transport, options=RegistryOptions(expand=True)).get_value(["A"], KEY, "Dir")

        assert plain.results[0].data == "%SystemRoot%\\Temp"
        assert expanded.results[0].data == "C:\\Windows\\Temp"


@pytest.mark.unit
class TestRelease:
    def test_handles_released_on_every_path(self, fake_winreg, transport, abc_hosts):
        runner = BatchRunner(transport, options=RegistryOptions(ping=True), probe=_probe({"B"}))

        runner.get_value(abc_hosts, KEY, "Port")
        runner.get_value(abc_hosts, KEY, "Missing")

        assert fake_winreg.open_handles == []

    def test_session_closed_propagates(self, transport, abc_hosts):
        def misuse(acc, handle):
            handle.session.close()
            return acc.get(handle, "Port")

        with pytest.raises(SessionClosed):
            BatchRunner(transport).run(["A"], Operation(name="misuse", key=KEY, invoke=misuse))

    def test_parallel_runs_hosts_concurrently(self, fake_winreg, transport):
        hosts = [f"H{i}" for i in range(4)]
        for h in hosts:
            fake_winreg.add_key(h, KEY)
        seen = set()
        lock = threading.Lock()

        def record(acc, handle):
            with lock:
                seen.add(threading.current_thread().name)

        options = RegistryOptions(max_workers=4)
        op = Operation(name="record", key=KEY, invoke=record, mode=AccessMode.READ_ONLY)
        batch = BatchRunner(transport, options=options).run(hosts, op)

        assert [o.host for o in batch.outcomes] == hosts
        assert batch.ok
        assert seen


@pytest.mark.unit
class TestHostIsolation:
    def test_raising_reachability_check_skips_only_that_host(self, transport, abc_hosts):
        long_host = "x" * 70 + ".example"

        def check(host):
            if host == long_host:
                raise UnicodeError("encoding with 'idna' codec failed (label too long)")
            return True

        runner = BatchRunner(transport, options=RegistryOptions(ping=True), probe=check)

        batch = runner.get_value([long_host, "A"], KEY, "Port")

        assert [o.state for o in batch.outcomes] == [HostState.SKIPPED, HostState.SUCCEEDED]
        assert batch.results[0].data == 3389

    def test_rpc_failure_opening_key_is_connection_error(self, fake_winreg, transport, abc_hosts):
        fake_winreg.open_errors["a"] = OSError(1722, "The RPC server is unavailable")

        batch = BatchRunner(transport).get_value(["A", "C"], KEY, "Port")

        assert batch.outcomes[0].error_kind == "ConnectionError"
        assert batch.outcomes[1].error_kind == "KeyNotFound"
        assert fake_winreg.open_handles == []

    def test_bare_string_is_one_host(self, fake_winreg, transport, abc_hosts):
        batch = BatchRunner(transport).get_value("A", KEY, "Port")

        assert [o.host for o in batch.outcomes] == ["A"]
        assert batch.results[0].data == 3389

    def test_summary_logged(self, transport, abc_hosts):
        logger = Mock()

        BatchRunner(transport, logger=logger).get_value(["A"], KEY, "Port")
        BatchRunner(transport, logger=logger).get_value(["C"], KEY, "Port")

        infos = [c.args[1] for c in logger.info.call_args_list if len(c.args) > 1]
        warnings = [c.args[1] for c in logger.warning.call_args_list if len(c.args) > 1]
        assert "registry get on 1 host(s)" in infos
        assert "registry get: 1 succeeded, 0 failed, 0 skipped" in infos
        assert "registry get: 0 succeeded, 1 failed, 0 skipped" in warnings
