# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Dynamic spending guardrail.

A two-state hysteresis policy keyed to the portfolio value at the start of
retirement: spending is cut once the balance falls below 80% of that value
and restored once it recovers to 90%.
"""

from dataclasses import dataclass

ACTIVATION_THRESHOLD = 0.8
RECOVERY_THRESHOLD = 0.9
SPENDING_CUT = 0.9


@dataclass(frozen=True)
class GuardrailDecision:
    """Outcome of one year's guardrail evaluation.

    Attributes:
        spending_factor: Multiplier for this year's discretionary spending
        activated: Whether the guardrail switched on this year
    """
    spending_factor: float
    activated: bool


class GuardrailPolicy:
    """Per-trial guardrail state machine (Inactive <-> Active).

    Example:
        >>> policy = GuardrailPolicy()
        >>> policy.set_reference(1_000_000)
        >>> policy.evaluate(750_000).spending_factor
        0.9
        >>> policy.evaluate(950_000).spending_factor
        0.9
        >>> policy.evaluate(950_000).spending_factor
        1.0
    """

    def __init__(self,
                 activation_threshold: float = ACTIVATION_THRESHOLD,
                 recovery_threshold: float = RECOVERY_THRESHOLD,
                 spending_cut: float = SPENDING_CUT):
        self.activation_threshold = activation_threshold
        self.recovery_threshold = recovery_threshold
        self.spending_cut = spending_cut
        # Decisions are immutable, so the four possible outcomes are shared
        self._decisions = {
            (active, activated): GuardrailDecision(spending_cut if active else 1.0, activated)
            for active in (False, True) for activated in (False, True)
        }
        self.reset()

    def reset(self):
        """Return to the Inactive state with no reference balance."""
        self.active = False
        self.reference_balance = None
        self.activations = 0

    def set_reference(self, balance: float):
        """Record the retirement-start balance. Later calls are ignored."""
        if self.reference_balance is None:
            self.reference_balance = balance

    def evaluate(self, balance: float) -> GuardrailDecision:
        """Update the state for this year's balance and return the spending factor.

        The cut applies in the year the guardrail switches on. Recovery is
        checked after the cut is decided, so it takes effect the following
        year.
        """
        if not self.reference_balance or self.reference_balance <= 0:
            return self._decisions[False, False]

        activated = False
        if not self.active and balance < self.reference_balance * self.activation_threshold:
            self.active = True
            self.activations += 1
            activated = True

        decision = self._decisions[self.active, activated]

        if self.active and balance >= self.reference_balance * self.recovery_threshold:
            self.active = False

        return decision
