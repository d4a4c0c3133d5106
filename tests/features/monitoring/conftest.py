"""BDD step definitions for monitoring, audit and health features."""

import asyncio
import time
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from authtelemetry import AuthContext, AuthEvent, Telemetry, TelemetryConfig
from authtelemetry.adapters.sinks.in_memory import InMemorySink
from authtelemetry.core.models import HealthReport, HealthStatus, ProbeResult
from authtelemetry.core.ports import ProbePort


class OperationFailed(Exception):
    """Raised by the scenario operation on its failing calls."""


@dataclass
class MonitoringScenarioContext:
    """State shared between the steps of one scenario."""

    sink: InMemorySink = field(default_factory=InMemorySink)
    config: TelemetryConfig | None = None
    database_probe: ProbePort | None = None
    telemetry: Telemetry | None = None
    failures: int = 0
    raised: list[BaseException] = field(default_factory=list)
    report: HealthReport | None = None

    def build(self) -> Telemetry:
        self.telemetry = Telemetry(
            config=self.config, sink=self.sink, database_probe=self.database_probe
        )
        return self.telemetry


@pytest.fixture
def ctx() -> MonitoringScenarioContext:
    """Fresh scenario context for each test."""
    return MonitoringScenarioContext()


# === Given ===


@given(parsers.parse("a telemetry pipeline with an error alert threshold of {n:d}"))
def given_pipeline(ctx: MonitoringScenarioContext, n: int) -> None:
    ctx.config = TelemetryConfig(
        pii_salt="bdd-salt",
        error_alert_threshold=n,
        memory_threshold_mb=1024 * 1024,
    )
    ctx.build()


@given(parsers.parse('the database probe fails with "{message}"'))
def given_failing_database(ctx: MonitoringScenarioContext, message: str) -> None:
    def database() -> ProbeResult:
        raise ConnectionError(message)

    ctx.database_probe = database
    ctx.build()


# === When ===


@when(
    parsers.parse(
        '"{operation}" is called {n:d} times taking {ms:d}ms and failing every {k:d}th call'
    )
)
def when_called_repeatedly(
    ctx: MonitoringScenarioContext, operation: str, n: int, ms: int, k: int
) -> None:
    """Call a wrapped operation n times; every k-th call raises."""

    def work(call: int) -> int:
        time.sleep(ms / 1000)
        if call % k == 0:
            raise OperationFailed("periodic failure")
        return call

    wrapped = ctx.telemetry.wrap(operation, work)
    for call in range(1, n + 1):
        try:
            wrapped(call)
        except OperationFailed as exc:
            ctx.raised.append(exc)
            ctx.failures += 1


@when(parsers.parse('"{operation}" is called once and succeeds'))
def when_called_once_succeeds(ctx: MonitoringScenarioContext, operation: str) -> None:
    ctx.telemetry.wrap(operation, lambda: "ok")()


@when(parsers.parse('"{operation}" is called once and fails'))
def when_called_once_fails(ctx: MonitoringScenarioContext, operation: str) -> None:
    def work() -> None:
        raise OperationFailed("rejected")

    with pytest.raises(OperationFailed) as excinfo:
        ctx.telemetry.wrap(operation, work)()
    ctx.raised.append(excinfo.value)
    ctx.failures += 1


@when(parsers.parse('a "{event}" event is logged for "{email}" from "{ip}"'))
def when_auth_event(ctx: MonitoringScenarioContext, event: str, email: str, ip: str) -> None:
    ctx.telemetry.log_auth_attempt(
        AuthEvent(event),
        AuthContext(correlation_id="trace-bdd", email=email, ip_address=ip),
    )


@when("the health check runs")
def when_health_check(ctx: MonitoringScenarioContext) -> None:
    ctx.report = asyncio.run(ctx.telemetry.perform_health_check())


# === Then ===


@then(parsers.parse('the metrics for "{operation}" should have count {n:d}'))
def then_metrics_count(ctx: MonitoringScenarioContext, operation: str, n: int) -> None:
    assert ctx.telemetry.export_metrics()[operation].count == n


@then(parsers.parse("there should be {n:d} error signature with count {count:d}"))
def then_signature_count(ctx: MonitoringScenarioContext, n: int, count: int) -> None:
    stats = ctx.telemetry.export_error_stats()
    assert len(stats) == n
    assert list(stats.values()) == [count] * n


@then(parsers.parse('there should be {n:d} "{prefix}" records'))
def then_record_count(ctx: MonitoringScenarioContext, n: int, prefix: str) -> None:
    assert len(ctx.sink.with_prefix(prefix)) == n


@then("every failed call should have re-raised its error")
def then_reraised(ctx: MonitoringScenarioContext) -> None:
    assert len(ctx.raised) == ctx.failures
    assert all(isinstance(exc, OperationFailed) for exc in ctx.raised)


@then(parsers.parse('the "{prefix}" records should be "{phases}"'))
def then_phases(ctx: MonitoringScenarioContext, prefix: str, phases: str) -> None:
    records = ctx.sink.with_prefix(prefix + " ")
    actual = [e.message.removeprefix(prefix + " ") for e in records]
    assert actual == [p.strip() for p in phases.split(",")]


@then("both records should share one correlation id")
def then_shared_correlation(ctx: MonitoringScenarioContext) -> None:
    ids = {e.attributes["correlation_id"] for e in ctx.sink.with_prefix("[MONITORING]")}
    assert len(ids) == 1


@then(parsers.parse('the last "{prefix}" record should have level "{level}"'))
def then_last_level(ctx: MonitoringScenarioContext, prefix: str, level: str) -> None:
    assert ctx.sink.with_prefix(prefix)[-1].level == level


@then(parsers.parse('no record should contain "{text}"'))
def then_no_record_contains(ctx: MonitoringScenarioContext, text: str) -> None:
    for entry in ctx.sink.entries:
        assert text not in entry.message
        assert text not in repr(entry.attributes)


@then(parsers.parse('the overall status should be "{status}"'))
def then_overall_status(ctx: MonitoringScenarioContext, status: str) -> None:
    assert ctx.report.status is HealthStatus(status)


@then(parsers.parse('the "{name}" check should report error "{message}"'))
def then_check_error(ctx: MonitoringScenarioContext, name: str, message: str) -> None:
    assert ctx.report.checks[name].error == message


@then(parsers.parse('the "{name}" check should be "{status}"'))
def then_check_status(ctx: MonitoringScenarioContext, name: str, status: str) -> None:
    assert ctx.report.checks[name].status is HealthStatus(status)
