"""
Immutable rate configuration for one calculation run.
Holds award rates by classification, penalty rules and allowance rates.
Validation happens at construction: a bad table never reaches a calculation.
"""
import logging
from collections import defaultdict
from datetime import date, time
from typing import Iterable

from labour_engine.models.labour import AllowanceRate, AwardRate, PenaltyRule
from labour_engine.services.errors import RateConfigError, RateNotFoundError, UnknownClassificationError

logger = logging.getLogger(__name__)

# Trigger tags an AllowanceRate may use; evaluated in rate_resolver
KNOWN_TRIGGERS = frozenset({
    "ALWAYS",
    "SPLIT_SHIFT",
    "LATE_NIGHT",
    "EVENING",
    "FIRST_AID",
    "TOOL",
    "HIGHER_DUTIES",
})


class RateTable:
    def __init__(
        self,
        award_rates: Iterable[AwardRate],
        penalty_rules: Iterable[PenaltyRule] = (),
        allowance_rates: Iterable[AllowanceRate] = (),
        award_code: str = "",
        rates_version: str = "",
    ):
        self.award_code = award_code
        self.rates_version = rates_version

        by_class: dict[str, list[AwardRate]] = defaultdict(list)
        for rate in award_rates:
            by_class[rate.classification].append(rate)
        for classification, rates in by_class.items():
            rates.sort(key=lambda r: r.effective_from)
            for earlier, later in zip(rates, rates[1:]):
                if earlier.overlaps(later):
                    raise RateConfigError(
                        f"Overlapping award rates for {classification!r}: "
                        f"{earlier.effective_from}..{earlier.effective_to or 'open'} and "
                        f"{later.effective_from}..{later.effective_to or 'open'}"
                    )
        self._rates = {c: tuple(r) for c, r in by_class.items()}

        names = set()
        rules = []
        for rule in penalty_rules:
            if rule.name in names:
                raise RateConfigError(f"Duplicate penalty rule name {rule.name!r}")
            names.add(rule.name)
            rules.append(rule)
        self.penalty_rules: tuple[PenaltyRule, ...] = tuple(sorted(rules, key=lambda r: (r.precedence, r.name)))

        allowances = tuple(allowance_rates)
        for allowance in allowances:
            if allowance.trigger not in KNOWN_TRIGGERS:
                raise RateConfigError(
                    f"Allowance {allowance.type!r} uses unknown trigger {allowance.trigger!r}"
                )
        self.allowance_rates: tuple[AllowanceRate, ...] = allowances

        self._boundaries = self._collect_boundaries()
        logger.debug(
            "Rate table %s loaded: %d classifications, %d penalty rules, %d allowances",
            award_code or "<unnamed>", len(self._rates), len(self.penalty_rules), len(self.allowance_rates),
        )

    def _collect_boundaries(self) -> tuple[time, ...]:
        points = set()
        windows = [r.time_window for r in self.penalty_rules] + [a.time_window for a in self.allowance_rates]
        for window in windows:
            if window is not None:
                points.update(window.boundaries())
        # Midnight is always a cut point (day-type change)
        points.discard(time(0, 0))
        return tuple(sorted(points))

    @property
    def classifications(self) -> frozenset[str]:
        return frozenset(self._rates)

    @property
    def time_boundaries(self) -> tuple[time, ...]:
        """Every time of day where some penalty or allowance window starts or ends."""
        return self._boundaries

    def require_classification(self, classification: str, on_date: date) -> None:
        if classification not in self._rates:
            raise UnknownClassificationError(classification, on_date)

    def rate_for(self, classification: str, on_date: date) -> AwardRate:
        self.require_classification(classification, on_date)
        for rate in self._rates[classification]:
            if rate.covers(on_date):
                return rate
        raise RateNotFoundError(classification, on_date)

    def rates_for(self, classification: str) -> tuple[AwardRate, ...]:
        return self._rates.get(classification, ())
