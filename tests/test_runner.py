"""Tests for core/runner.py."""

# pylint: disable=missing-function-docstring,redefined-outer-name

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence
from unittest.mock import patch

import pytest
from fakes import DIG_PATH, FakeExecutor, fake_which, missing_which

from dig_runner.core.models import DnsRecord, QueryResult
from dig_runner.core.outcome import Err, Ok
from dig_runner.core.process import (
    TIMEOUT_EXIT_STATUS,
    CompletedCommand,
    NativeTimeoutWrapper,
    SupervisedTimeout,
)
from dig_runner.core.runner import QueryRunner, build_dig_argv, query, run
from dig_runner.dns.validation import QueryRequest
from dig_runner.utils.exceptions import (
    ExecutionFailed,
    InvalidArgument,
    QueryTimeout,
    Unavailable,
)


class TestBuildDigArgv:
    """Tests for build_dig_argv."""

    def test_argument_order(self):
        request = QueryRequest(
            domain="example.com", record_type="MX", server="1.1.1.1", timeout_seconds=5
        )
        assert build_dig_argv("dig", request) == [
            "dig",
            "@1.1.1.1",
            "example.com",
            "MX",
            "+noall",
            "+answer",
        ]


class TestQueryRunnerSuccess:
    """Tests for successful lookups."""

    def test_returns_parsed_records(self, runner):
        result = runner.run("example.com", "A")

        assert isinstance(result, QueryResult)
        assert result.records == [
            DnsRecord(name="example.com.", type="A", ttl=300, data="93.184.216.34"),
            DnsRecord(name="example.com.", type="A", ttl=300, data="93.184.216.35"),
        ]

    def test_raw_output_is_full_stdout(self, runner, fake_executor):
        result = runner.run("example.com", "A")
        assert result.raw_output == fake_executor.stdout

    def test_execution_time_format(self, runner):
        result = runner.run("example.com", "A")

        assert re.fullmatch(r"\d+\.\d{2}", result.execution_time_ms)
        assert float(result.execution_time_ms) >= 0

    def test_execution_time_measured_around_process(self, runner):
        with patch(
            "dig_runner.core.runner.time.perf_counter", side_effect=[1.0, 1.0123456]
        ):
            result = runner.run("example.com", "A")

        assert result.execution_time_ms == "12.35"

    def test_command_uses_defaults(self, runner, fake_executor):
        runner.run("example.com", "a")

        call = fake_executor.calls[0]
        assert call["argv"] == [
            DIG_PATH,
            "@8.8.8.8",
            "example.com",
            "A",
            "+noall",
            "+answer",
        ]
        assert call["deadline"] == 10.0

    def test_timeout_is_clamped(self, runner, fake_executor):
        runner.run("example.com", "A", timeout_seconds=45)
        assert fake_executor.calls[0]["deadline"] == 30.0

    def test_root_domain(self, runner, fake_executor):
        runner.run(".", "NS", server="2001:4860:4860::8888")

        argv = fake_executor.calls[0]["argv"]
        assert argv[1:4] == ["@2001:4860:4860::8888", ".", "NS"]

    def test_empty_output_is_success(self, runner, fake_executor):
        fake_executor.stdout = ""
        result = runner.run("nxdomain.example", "A")

        assert result.records == []
        assert result.raw_output == ""

    def test_comment_only_output_is_success(self, runner, fake_executor):
        fake_executor.stdout = ";; connection timed out; no servers could be reached\n"
        result = runner.run("example.com", "A")
        assert result.records == []

    def test_native_wrapper_prefixes_command(self, test_settings, fake_executor):
        runner = QueryRunner(
            settings=test_settings,
            strategy=NativeTimeoutWrapper(binary="/usr/bin/timeout", grace_seconds=2.0),
            executor=fake_executor,
            which=fake_which,
        )
        runner.run("example.com", "TXT", timeout_seconds=5)

        call = fake_executor.calls[0]
        assert call["argv"][:3] == ["/usr/bin/timeout", "5", DIG_PATH]
        assert call["deadline"] == 7.0


class TestQueryRunnerFailures:
    """Tests for validation, pre-flight and execution failures."""

    @pytest.mark.parametrize(
        "args",
        [
            ("example.com", "BOGUS"),
            ("bad domain", "A"),
            ("example.com", "A", "999.1.1.1"),
            ("example.com", "A", "not-an-ip"),
            ("example.com", "A", "8.8.8.8", 0),
            ("example.com", "A", "8.8.8.8", -3),
            ("example.com\n", "A"),
            ("example.com", "A", "fe80::1%eth0"),
        ],
    )
    def test_invalid_arguments_never_spawn(self, runner, fake_executor, args):
        with pytest.raises(InvalidArgument):
            runner.run(*args)

        assert fake_executor.calls == []

    def test_missing_dig_raises_unavailable(self, test_settings, fake_executor):
        runner = QueryRunner(
            settings=test_settings,
            executor=fake_executor,
            which=missing_which,
        )
        with pytest.raises(Unavailable, match="not available"):
            runner.run("example.com", "A")

        assert fake_executor.calls == []

    def test_validation_precedes_preflight(self, test_settings, fake_executor):
        runner = QueryRunner(
            settings=test_settings,
            executor=fake_executor,
            which=missing_which,
        )
        with pytest.raises(InvalidArgument):
            runner.run("example.com", "BOGUS")

    def test_non_zero_exit_carries_stderr(self, runner, fake_executor):
        fake_executor.returncode = 1
        fake_executor.stderr = "dig: couldn't get address for 'x': not found"

        with pytest.raises(ExecutionFailed) as exc_info:
            runner.run("example.com", "A")

        assert "couldn't get address" in str(exc_info.value)
        assert exc_info.value.stderr == fake_executor.stderr
        assert exc_info.value.returncode == 1

    def test_non_zero_exit_is_not_timeout(self, runner, fake_executor):
        fake_executor.returncode = TIMEOUT_EXIT_STATUS

        with pytest.raises(ExecutionFailed) as exc_info:
            runner.run("example.com", "A")

        assert not isinstance(exc_info.value, QueryTimeout)

    def test_native_wrapper_expiry_raises_timeout(self, test_settings):
        executor = FakeExecutor(returncode=TIMEOUT_EXIT_STATUS)
        runner = QueryRunner(
            settings=test_settings,
            strategy=NativeTimeoutWrapper(),
            executor=executor,
            which=fake_which,
        )
        with pytest.raises(QueryTimeout, match="timed out after 3 seconds"):
            runner.run("example.com", "A", timeout_seconds=3)

    def test_supervisor_timeout_propagates(self, runner, fake_executor):
        fake_executor.raises = QueryTimeout("DNS lookup timed out after 10 seconds")

        with pytest.raises(QueryTimeout):
            runner.run("example.com", "A")

    def test_spawn_failure_propagates(self, runner, fake_executor):
        fake_executor.raises = Unavailable("Failed to execute the dig command")

        with pytest.raises(Unavailable, match="Failed to execute"):
            runner.run("example.com", "A")


class TestQueryOutcome:
    """Tests for the tagged outcome API."""

    def test_ok_outcome(self, runner):
        outcome = runner.query("example.com", "A")

        assert isinstance(outcome, Ok)
        assert outcome.is_ok is True
        assert len(outcome.value.records) == 2
        assert outcome.unwrap() is outcome.value

    def test_err_outcome(self, runner):
        outcome = runner.query("example.com", "BOGUS")

        assert isinstance(outcome, Err)
        assert outcome.is_ok is False
        assert isinstance(outcome.error, InvalidArgument)

    def test_err_unwrap_raises(self, runner):
        outcome = runner.query("example.com", "A", "not-an-ip")

        with pytest.raises(InvalidArgument):
            outcome.unwrap()


@dataclass
class PerDomainExecutor:
    """Fake executor answering with a record named after the queried domain."""

    def __call__(self, argv: Sequence[str], deadline: float) -> CompletedCommand:
        domain = argv[2]
        return CompletedCommand(
            returncode=0,
            stdout=f"{domain}. 60 IN A 192.0.2.1\n",
            stderr="",
        )


class TestConcurrency:
    """Tests for concurrent use of a single runner."""

    def test_concurrent_calls_do_not_interfere(self, test_settings):
        runner = QueryRunner(
            settings=test_settings,
            strategy=SupervisedTimeout(),
            executor=PerDomainExecutor(),
            which=fake_which,
        )
        domains = [f"host{i}.example.com" for i in range(50)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda d: runner.run(d, "A"), domains))

        assert [r.records[0].name for r in results] == [f"{d}." for d in domains]


class TestModuleFunctions:
    """Tests for module-level run and query helpers."""

    def test_run_raises_for_bad_record_type(self):
        with pytest.raises(InvalidArgument):
            run("example.com", "BOGUS")

    def test_query_returns_err_for_bad_server(self):
        outcome = query("example.com", "A", "not-an-ip")
        assert isinstance(outcome.error, InvalidArgument)
