"""Contract for external schedule advisors (e.g. an LLM assistant).

An advisor looks at a generated schedule and may propose a full alternative
session set. Proposals are untrusted: they are validated and scored again
and only accepted when they do not add critical conflicts.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from .algorithm import assemble_schedule
from .models import Catalog, GeneratedSchedule, ScheduleConstraints, ScheduleSession, Severity
from .validator import ScheduleValidator

logger = logging.getLogger(__name__)


class ScheduleAdvisor(Protocol):
    """Anything that can propose an alternative session set."""

    def propose(
        self, schedule: GeneratedSchedule, catalog: Catalog
    ) -> Sequence[ScheduleSession] | None:
        """Return alternative sessions, or None when there is nothing to suggest."""
        ...


@dataclass(frozen=True)
class ProposalReview:
    """Outcome of re-validating a proposal against the original schedule."""

    accepted: bool
    schedule: GeneratedSchedule
    critical_before: int
    critical_after: int


def review_proposal(
    original: GeneratedSchedule,
    proposal: Sequence[ScheduleSession],
    catalog: Catalog,
    constraints: ScheduleConstraints,
) -> ProposalReview:
    """Validate and score a proposed session set.

    Both session sets are checked by the same validator, so the critical
    counts compare like with like. The proposal is accepted when its critical
    count does not exceed the original's.

    Returns:
        ProposalReview whose schedule is the re-scored proposal when accepted,
        otherwise the original schedule unchanged
    """
    validator = ScheduleValidator(catalog, constraints)
    critical_before = validator.validate(original.sessions).count(Severity.CRITICAL)

    log = validator.validate(proposal)
    critical_after = log.count(Severity.CRITICAL)

    if critical_after > critical_before:
        logger.warning(
            f"Rejected proposal: critical conflicts would rise from "
            f"{critical_before} to {critical_after}"
        )
        return ProposalReview(
            accepted=False,
            schedule=original,
            critical_before=critical_before,
            critical_after=critical_after,
        )

    reviewed = assemble_schedule(proposal, log.conflicts, catalog, constraints)
    logger.info(
        f"Accepted proposal: {len(reviewed.sessions)} sessions, "
        f"critical {critical_before} -> {critical_after}, score {original.score} -> {reviewed.score}"
    )
    return ProposalReview(
        accepted=True,
        schedule=reviewed,
        critical_before=critical_before,
        critical_after=critical_after,
    )


def apply_advice(
    advisor: ScheduleAdvisor,
    schedule: GeneratedSchedule,
    catalog: Catalog,
    constraints: ScheduleConstraints,
) -> GeneratedSchedule:
    """Ask an advisor for a proposal and return the schedule to keep."""
    proposal = advisor.propose(schedule, catalog)
    if proposal is None:
        logger.info("Advisor had no proposal")
        return schedule
    return review_proposal(schedule, proposal, catalog, constraints).schedule
