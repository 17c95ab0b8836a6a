# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Simulation input parameters.

Every dataclass here is frozen: a parameter bundle is captured once per run
and never changes while the run is in progress. Validation happens in
`__post_init__` so a malformed bundle can never reach the simulator.
`SimulationParams.from_dict` accepts the JSON shape sent by the host, with
either snake_case or camelCase keys.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from ..account.contributions import ScheduledContribution
from ..housing.mortgage import DEFAULT_APPRECIATION_RATE, RelocationPlan
from ..limits import EARLIEST_CLAIMING_AGE, LATEST_CLAIMING_AGE, MEDICAL_INFLATION_HISTORICAL
from .errors import SimulationInputError

DEFAULT_LIFE_EXPECTANCY = 90


@dataclass(frozen=True)
class RateRange:
    """Caller-supplied bounds for one rate factor (decimals).

    Attributes:
        optimistic: Optimistic bound
        pessimistic: Pessimistic bound
        market_sentiment: Optional anchor for the most likely value
    """
    optimistic: float
    pessimistic: float
    market_sentiment: Optional[float] = None

    @property
    def low(self) -> float:
        return min(self.optimistic, self.pessimistic)

    @property
    def high(self) -> float:
        return max(self.optimistic, self.pessimistic)


@dataclass(frozen=True)
class RateAssumptions:
    """Optional bound overrides per factor; None means use historical parameters."""
    inflation: Optional[RateRange] = None
    stock_returns: Optional[RateRange] = None
    bond_returns: Optional[RateRange] = None


@dataclass(frozen=True)
class Allocation:
    """Target weights for stocks, bonds and cash; need not sum to 1."""
    stocks: float
    bonds: float
    cash: float = 0.0

    def __post_init__(self):
        if min(self.stocks, self.bonds, self.cash) < 0:
            raise SimulationInputError("Allocation weights cannot be negative")
        if self.stocks + self.bonds + self.cash <= 0:
            raise SimulationInputError("Allocation weights must have a positive total")

    def normalized(self) -> Tuple[float, float, float]:
        total = self.stocks + self.bonds + self.cash
        return self.stocks / total, self.bonds / total, self.cash / total


@dataclass(frozen=True)
class SocialSecurityParams:
    """Benefit-claiming inputs for the primary and (optionally) the spouse.

    Attributes:
        insurance_amount: Primary's monthly benefit at full retirement age
        claiming_age: Primary's claiming age (62-70)
        full_retirement_age: Primary's full retirement age
        married: Whether spouse fields apply
        spouse_insurance_amount: Spouse's monthly benefit at full retirement age
        spouse_claiming_age: Spouse's claiming age (62-70)
        spouse_full_retirement_age: Spouse's full retirement age
        spouse_current_age: Spouse's age today; defaults to the primary's age
        life_expectancy: Primary's life expectancy
        spouse_life_expectancy: Spouse's life expectancy
    """
    insurance_amount: float
    claiming_age: float = 67
    full_retirement_age: float = 67
    married: bool = False
    spouse_insurance_amount: float = 0.0
    spouse_claiming_age: float = 67
    spouse_full_retirement_age: float = 67
    spouse_current_age: Optional[int] = None
    life_expectancy: Optional[int] = None
    spouse_life_expectancy: Optional[int] = None

    def __post_init__(self):
        if self.insurance_amount < 0 or self.spouse_insurance_amount < 0:
            raise SimulationInputError("Benefit amounts cannot be negative")
        ages = [self.claiming_age]
        if self.married:
            ages.append(self.spouse_claiming_age)
        for age in ages:
            if not EARLIEST_CLAIMING_AGE <= age <= LATEST_CLAIMING_AGE:
                raise SimulationInputError(
                    f"Claiming age must be between {EARLIEST_CLAIMING_AGE} and "
                    f"{LATEST_CLAIMING_AGE}, got {age}"
                )


@dataclass(frozen=True)
class MedicareParams:
    """Inputs for the income-related Medicare premium surcharge."""
    enabled: bool = True
    pension_income: float = 0.0
    investment_income: float = 0.0
    estimated_tax_deferred_balance: float = 0.0
    medical_inflation: float = MEDICAL_INFLATION_HISTORICAL

    def __post_init__(self):
        if min(self.pension_income, self.investment_income,
               self.estimated_tax_deferred_balance) < 0:
            raise SimulationInputError("Medicare income inputs cannot be negative")


@dataclass(frozen=True)
class HouseholdParams:
    """Household-level goals and longevity.

    Attributes:
        legacy_goal: Minimum ending balance for a trial to count as a success
        life_expectancy: Primary's life expectancy (overrides benefit inputs)
        spouse_life_expectancy: Spouse's life expectancy
    """
    legacy_goal: float = 0.0
    life_expectancy: Optional[int] = None
    spouse_life_expectancy: Optional[int] = None

    def __post_init__(self):
        if self.legacy_goal < 0:
            raise SimulationInputError("Legacy goal cannot be negative")


@dataclass(frozen=True)
class ExcessIncomeSettings:
    """Automatic saving of surplus income before retirement.

    Attributes:
        enabled: Whether surplus is saved
        save_percentage: Share of the surplus saved (0-100)
        annual_surplus: Income left after expenses and planned savings, today's dollars
    """
    enabled: bool = False
    save_percentage: float = 50.0
    annual_surplus: float = 0.0

    def __post_init__(self):
        if not 0 <= self.save_percentage <= 100:
            raise SimulationInputError("Excess income save percentage must be within 0-100")
        if self.annual_surplus < 0:
            raise SimulationInputError("Annual surplus cannot be negative")

    def annual_saving(self) -> float:
        if not self.enabled:
            return 0.0
        return self.annual_surplus * self.save_percentage / 100


@dataclass(frozen=True)
class MortgageParams:
    """Current mortgage and home, plus an optional relocation."""
    balance: float
    interest_rate: float
    monthly_payment: float
    home_value: float
    appreciation_rate: float = DEFAULT_APPRECIATION_RATE
    relocation: Optional[RelocationPlan] = None

    def __post_init__(self):
        if min(self.balance, self.interest_rate, self.monthly_payment, self.home_value) < 0:
            raise SimulationInputError("Mortgage values cannot be negative")
        if self.relocation is not None:
            plan = self.relocation
            if min(plan.new_purchase_price, plan.new_mortgage_amount,
                   plan.new_interest_rate, plan.new_term_months) < 0:
                raise SimulationInputError("Relocation values cannot be negative")
            if plan.new_mortgage_amount > 0 and plan.new_term_months == 0:
                raise SimulationInputError("Relocation mortgage needs a term of at least one month")
            if plan.sale_price is not None and plan.sale_price < 0:
                raise SimulationInputError("Relocation sale price cannot be negative")


@dataclass(frozen=True)
class SimulationParams:
    """Everything one simulation run needs, captured at call time.

    Attributes:
        current_age: Primary's age today
        retirement_age: Age the primary stops working; must exceed current_age
        current_savings: Starting portfolio balance
        annual_contribution: Base contribution per pre-retirement year
        monthly_retirement_spending: Spending target in today's dollars
        allocation: Target asset weights
        annual_income: Household income today (for income-linked contributions)
    """
    current_age: int
    retirement_age: int
    current_savings: float
    annual_contribution: float
    monthly_retirement_spending: float
    allocation: Allocation
    rate_assumptions: Optional[RateAssumptions] = None
    social_security: Optional[SocialSecurityParams] = None
    medicare: Optional[MedicareParams] = None
    household: Optional[HouseholdParams] = None
    contributions: Tuple[ScheduledContribution, ...] = field(default_factory=tuple)
    excess_income: Optional[ExcessIncomeSettings] = None
    mortgage: Optional[MortgageParams] = None
    annual_income: float = 0.0
    hsa_family_coverage: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise SimulationInputError if the parameters cannot be simulated."""
        if self.current_age < 0:
            raise SimulationInputError("Current age cannot be negative")
        if self.retirement_age <= self.current_age:
            raise SimulationInputError(
                f"Retirement age ({self.retirement_age}) must be greater than "
                f"current age ({self.current_age})"
            )
        for name in ('current_savings', 'annual_contribution',
                     'monthly_retirement_spending', 'annual_income'):
            if getattr(self, name) < 0:
                raise SimulationInputError(f"{name} cannot be negative")
        for flow in self.contributions:
            if flow.start_age > flow.end_age:
                raise SimulationInputError(
                    f"Contribution to {flow.account_type} starts after it ends "
                    f"({flow.start_age} > {flow.end_age})"
                )
            if flow.annual_amount < 0:
                raise SimulationInputError("Contribution amounts cannot be negative")

    @property
    def legacy_goal(self) -> float:
        return self.household.legacy_goal if self.household else 0.0

    @property
    def married(self) -> bool:
        return bool(self.social_security and self.social_security.married)

    def life_expectancies(self) -> Tuple[int, int]:
        """Primary and spouse life expectancy, household values taking precedence."""
        primary = spouse = None
        if self.household is not None:
            primary = self.household.life_expectancy
            spouse = self.household.spouse_life_expectancy
        if self.social_security is not None:
            primary = primary or self.social_security.life_expectancy
            spouse = spouse or self.social_security.spouse_life_expectancy
        return primary or DEFAULT_LIFE_EXPECTANCY, spouse or DEFAULT_LIFE_EXPECTANCY

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SimulationParams':
        """Build parameters from a JSON-style mapping.

        Raises:
            SimulationInputError: If a required field is missing or a value
                                  has the wrong type
        """
        if not isinstance(data, Mapping):
            raise SimulationInputError("params must be an object")

        allocation = _section(data, 'allocation')
        if allocation is None:
            raise SimulationInputError("Missing required field 'allocation'")

        return cls(
            current_age=_integer(_require(data, 'current_age'), 'current_age'),
            retirement_age=_integer(_require(data, 'retirement_age'), 'retirement_age'),
            current_savings=_number(_require(data, 'current_savings'), 'current_savings'),
            annual_contribution=_number(_pick(data, 'annual_contribution', 0.0), 'annual_contribution'),
            monthly_retirement_spending=_number(
                _require(data, 'monthly_retirement_spending'), 'monthly_retirement_spending'),
            allocation=Allocation(
                stocks=_number(_pick(allocation, 'stocks', 0.0), 'allocation.stocks'),
                bonds=_number(_pick(allocation, 'bonds', 0.0), 'allocation.bonds'),
                cash=_number(_pick(allocation, 'cash', 0.0), 'allocation.cash'),
            ),
            rate_assumptions=_rate_assumptions(_section(data, 'rate_assumptions')),
            social_security=_social_security(_section(data, 'social_security')),
            medicare=_medicare(_section(data, 'medicare')),
            household=_household(_section(data, 'household')),
            contributions=_contributions(_pick(data, 'contributions', None)),
            excess_income=_excess_income(_section(data, 'excess_income')),
            mortgage=_mortgage(_section(data, 'mortgage')),
            annual_income=_number(_pick(data, 'annual_income', 0.0), 'annual_income'),
            hsa_family_coverage=_flag(_pick(data, 'hsa_family_coverage', False), 'hsa_family_coverage'),
        )


def _camel(key: str) -> str:
    head, *rest = key.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def _pick(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    for candidate in (key, _camel(key)):
        if candidate in data and data[candidate] is not None:
            return data[candidate]
    return default


def _require(data: Mapping[str, Any], key: str) -> Any:
    value = _pick(data, key)
    if value is None:
        raise SimulationInputError(f"Missing required field '{key}'")
    return value


def _section(data: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = _pick(data, key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise SimulationInputError(f"'{key}' must be an object")
    return value


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SimulationInputError(f"'{name}' must be a number, got {value!r}")
    return float(value)


def _flag(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise SimulationInputError(f"'{name}' must be true or false, got {value!r}")
    return value


def _integer(value: Any, name: str) -> int:
    number = _number(value, name)
    if number != int(number):
        raise SimulationInputError(f"'{name}' must be a whole number, got {value!r}")
    return int(number)


def _optional_number(data: Mapping[str, Any], key: str) -> Optional[float]:
    value = _pick(data, key)
    return None if value is None else _number(value, key)


def _optional_integer(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = _pick(data, key)
    return None if value is None else _integer(value, key)


def _rate_range(data: Optional[Mapping[str, Any]], name: str) -> Optional[RateRange]:
    if data is None:
        return None
    return RateRange(
        optimistic=_number(_require(data, 'optimistic'), f'{name}.optimistic'),
        pessimistic=_number(_require(data, 'pessimistic'), f'{name}.pessimistic'),
        market_sentiment=_optional_number(data, 'market_sentiment'),
    )


def _rate_assumptions(data: Optional[Mapping[str, Any]]) -> Optional[RateAssumptions]:
    if data is None:
        return None
    return RateAssumptions(
        inflation=_rate_range(_section(data, 'inflation'), 'inflation'),
        stock_returns=_rate_range(_section(data, 'stock_returns'), 'stock_returns'),
        bond_returns=_rate_range(_section(data, 'bond_returns'), 'bond_returns'),
    )


def _social_security(data: Optional[Mapping[str, Any]]) -> Optional[SocialSecurityParams]:
    if data is None:
        return None
    return SocialSecurityParams(
        insurance_amount=_number(_require(data, 'insurance_amount'), 'insurance_amount'),
        claiming_age=_number(_pick(data, 'claiming_age', 67), 'claiming_age'),
        full_retirement_age=_number(_pick(data, 'full_retirement_age', 67), 'full_retirement_age'),
        married=_flag(_pick(data, 'married', False), 'married'),
        spouse_insurance_amount=_number(_pick(data, 'spouse_insurance_amount', 0.0),
                                        'spouse_insurance_amount'),
        spouse_claiming_age=_number(_pick(data, 'spouse_claiming_age', 67), 'spouse_claiming_age'),
        spouse_full_retirement_age=_number(_pick(data, 'spouse_full_retirement_age', 67),
                                           'spouse_full_retirement_age'),
        spouse_current_age=_optional_integer(data, 'spouse_current_age'),
        life_expectancy=_optional_integer(data, 'life_expectancy'),
        spouse_life_expectancy=_optional_integer(data, 'spouse_life_expectancy'),
    )


def _medicare(data: Optional[Mapping[str, Any]]) -> Optional[MedicareParams]:
    if data is None:
        return None
    return MedicareParams(
        enabled=_flag(_pick(data, 'enabled', True), 'medicare.enabled'),
        pension_income=_number(_pick(data, 'pension_income', 0.0), 'pension_income'),
        investment_income=_number(_pick(data, 'investment_income', 0.0), 'investment_income'),
        estimated_tax_deferred_balance=_number(
            _pick(data, 'estimated_tax_deferred_balance', 0.0), 'estimated_tax_deferred_balance'),
        medical_inflation=_number(_pick(data, 'medical_inflation', MEDICAL_INFLATION_HISTORICAL),
                                  'medical_inflation'),
    )


def _household(data: Optional[Mapping[str, Any]]) -> Optional[HouseholdParams]:
    if data is None:
        return None
    return HouseholdParams(
        legacy_goal=_number(_pick(data, 'legacy_goal', 0.0), 'legacy_goal'),
        life_expectancy=_optional_integer(data, 'life_expectancy'),
        spouse_life_expectancy=_optional_integer(data, 'spouse_life_expectancy'),
    )


def _contributions(data: Any) -> Tuple[ScheduledContribution, ...]:
    if data is None:
        return ()
    if not isinstance(data, (list, tuple)):
        raise SimulationInputError("'contributions' must be a list")

    flows = []
    for item in data:
        if not isinstance(item, Mapping):
            raise SimulationInputError("Each contribution must be an object")
        flows.append(ScheduledContribution(
            account_type=str(_require(item, 'account_type')),
            annual_amount=_number(_pick(item, 'annual_amount', 0.0), 'annual_amount'),
            start_age=_integer(_require(item, 'start_age'), 'start_age'),
            end_age=_integer(_require(item, 'end_age'), 'end_age'),
            income_linked=_flag(_pick(item, 'income_linked', _pick(item, 'is_income_linked', False)),
                                'income_linked'),
            income_link_percentage=_optional_number(item, 'income_link_percentage'),
        ))
    return tuple(flows)


def _excess_income(data: Optional[Mapping[str, Any]]) -> Optional[ExcessIncomeSettings]:
    if data is None:
        return None
    return ExcessIncomeSettings(
        enabled=_flag(_pick(data, 'enabled', False), 'excess_income.enabled'),
        save_percentage=_number(_pick(data, 'save_percentage', 50.0), 'save_percentage'),
        annual_surplus=_number(_pick(data, 'annual_surplus', 0.0), 'annual_surplus'),
    )


def _mortgage(data: Optional[Mapping[str, Any]]) -> Optional[MortgageParams]:
    if data is None:
        return None

    relocation = None
    plan = _section(data, 'relocation')
    if plan is not None:
        relocation = RelocationPlan(
            age=_integer(_require(plan, 'age'), 'relocation.age'),
            new_purchase_price=_number(_require(plan, 'new_purchase_price'),
                                       'relocation.new_purchase_price'),
            new_mortgage_amount=_number(_pick(plan, 'new_mortgage_amount', 0.0),
                                        'relocation.new_mortgage_amount'),
            new_interest_rate=_number(_pick(plan, 'new_interest_rate', 0.0),
                                      'relocation.new_interest_rate'),
            new_term_months=_integer(_pick(plan, 'new_term_months', 360),
                                     'relocation.new_term_months'),
            sale_price=_optional_number(plan, 'sale_price'),
        )

    return MortgageParams(
        balance=_number(_pick(data, 'balance', 0.0), 'mortgage.balance'),
        interest_rate=_number(_pick(data, 'interest_rate', 0.0), 'mortgage.interest_rate'),
        monthly_payment=_number(_pick(data, 'monthly_payment', 0.0), 'mortgage.monthly_payment'),
        home_value=_number(_pick(data, 'home_value', 0.0), 'mortgage.home_value'),
        appreciation_rate=_number(_pick(data, 'appreciation_rate', DEFAULT_APPRECIATION_RATE),
                                  'mortgage.appreciation_rate'),
        relocation=relocation,
    )

