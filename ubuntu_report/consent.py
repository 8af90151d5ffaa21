"""Opt-in/opt-out resolution."""
from __future__ import annotations

import enum
from typing import Callable, Optional

from .report import OptOutMarker, OutcomeRecord, Report, ReportError

PROMPT = "Do you agree to report this? [y (send metrics)/n (send opt out message)]: "


class Consent(enum.Enum):
    YES = "yes"
    NO = "no"
    UNSET = "unset"


class AmbiguousConsentError(ReportError):
    """No yes/no answer could be obtained for this run."""


Prompt = Callable[[Report], Consent]


def parse_answer(text: Optional[str]) -> Consent:
    value = (text or "").strip().lower()
    if value in ("y", "yes"):
        return Consent.YES
    if value in ("n", "no"):
        return Consent.NO
    return Consent.UNSET


def resolve(
    answer: Consent,
    report: Report,
    auto_confirm: bool = False,
    prompt: Optional[Prompt] = None,
) -> OutcomeRecord:
    """Decide which record may be stored and sent.

    A ``NO`` always wins and drops the report content entirely. ``UNSET`` is
    settled by ``auto_confirm`` or else by asking ``prompt``.
    """
    if answer is Consent.UNSET:
        if auto_confirm:
            answer = Consent.YES
        elif prompt is not None:
            answer = prompt(report)
    if answer is Consent.YES:
        return report
    if answer is Consent.NO:
        return OptOutMarker()
    raise AmbiguousConsentError("no answer given: nothing will be reported")


def prompt_user(
    report: Report,
    read: Optional[Callable[[str], str]] = None,
    write: Optional[Callable[[str], object]] = None,
) -> Consent:
    """Show ``report`` and ask until the answer is yes, no, or left empty."""
    read = read or input
    write = write or print
    write(report.to_json(indent=2))
    while True:
        try:
            raw = read(PROMPT)
        except EOFError:
            return Consent.UNSET
        if not raw.strip():
            return Consent.UNSET
        answer = parse_answer(raw)
        if answer is not Consent.UNSET:
            return answer
        write(f"'{raw.strip()}' is not a valid answer")


__all__ = ["AmbiguousConsentError", "Consent", "parse_answer", "prompt_user", "resolve"]
