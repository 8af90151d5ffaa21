"""End-to-end report lifecycle: build, gate, store, send."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .consent import Consent, Prompt, resolve
from .report import OptOutMarker, OutcomeRecord, Report, ReportError, build_report
from .sender import DEFAULT_TIMEOUT_SECONDS, DeliveryResult, endpoint_url, send_report
from .store import ReportStore
from .sysinfo import Host, OsIdentity, collect_facts

logger = logging.getLogger("ubuntu_report.pipeline")

Collector = Callable[[], Dict[str, Any]]
Sender = Callable[..., DeliveryResult]


class State(enum.Enum):
    START = "start"
    ALREADY_DECIDED = "already-decided"
    BUILT = "built"
    GATED = "gated"
    STORED = "stored"
    SENT = "sent"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineResult:
    states: List[State] = field(default_factory=lambda: [State.START])
    record: Optional[OutcomeRecord] = None
    delivery: Optional[DeliveryResult] = None

    @property
    def state(self) -> State:
        return self.states[-1]

    @property
    def already_decided(self) -> bool:
        return State.ALREADY_DECIDED in self.states

    def advance(self, state: State, log: logging.Logger) -> None:
        log.debug("pipeline: %s -> %s", self.state.value, state.value)
        self.states.append(state)


def show_report(host: Optional[Host] = None, log: Optional[logging.Logger] = None) -> Report:
    """Build the current report without persisting or sending it."""
    return build_report(collect_facts(host, log or logger))


def run_pipeline(
    answer: Consent,
    *,
    store: ReportStore,
    identity: OsIdentity,
    base_url: str,
    collector: Optional[Collector] = None,
    host: Optional[Host] = None,
    force: bool = False,
    auto_confirm: bool = False,
    prompt: Optional[Prompt] = None,
    send_opt_out: bool = True,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    sender: Sender = send_report,
    log: Optional[logging.Logger] = None,
) -> PipelineResult:
    """Run one reporting cycle for ``identity``.

    A record already stored under the identity's cache key settles the run
    without any network traffic unless ``force`` is set. Consent and store
    failures are re-raised once the run is marked failed; delivery failures
    are only logged since the decision is already durable.
    """
    log = log or logger
    cache_key = identity.cache_key
    result = PipelineResult()

    if not force:
        previous = store.load(cache_key)
        if previous is not None:
            log.info("a report decision already exists for %s, nothing to send", cache_key)
            result.record = previous
            result.advance(State.ALREADY_DECIDED, log)
            result.advance(State.DONE, log)
            return result

    facts = collector() if collector is not None else collect_facts(host, log)
    report = build_report(facts)
    result.advance(State.BUILT, log)

    try:
        record = resolve(answer, report, auto_confirm=auto_confirm, prompt=prompt)
        result.record = record
        result.advance(State.GATED, log)
        verdict = "declined" if isinstance(record, OptOutMarker) else "accepted"
        log.info("user %s reporting for %s", verdict, cache_key)

        store.save(cache_key, record)
        result.advance(State.STORED, log)
        log.info("report decision saved for %s", cache_key)
    except ReportError as exc:
        result.advance(State.FAILED, log)
        log.debug("pipeline failed: %s", exc)
        raise

    if isinstance(record, OptOutMarker) and not send_opt_out:
        log.info("opt-out recorded locally, not notifying the server")
        result.delivery = DeliveryResult(ok=True, skipped=True)
        result.advance(State.DONE, log)
        return result

    url = endpoint_url(base_url, identity)
    result.delivery = sender(url, record, timeout=timeout, logger=log)
    result.advance(State.SENT, log)
    if result.delivery.ok:
        log.info("report sent to %s", url)
    else:
        log.warning("report saved but could not be sent to %s: %s", url, result.delivery.error)
    result.advance(State.DONE, log)
    return result


__all__ = ["PipelineResult", "State", "run_pipeline", "show_report"]
