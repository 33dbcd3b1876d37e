"""
Engine Data Model

Immutable input records and derived result records shared by every
calculation module. All money is in dollars, loan terms in months,
and rates are decimals (e.g., 0.05 for 5%).
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

DEFAULT_APPRECIATION_RATE = 0.035
DEFAULT_COST_BASIS_RATIO = 0.8
DEFAULT_HOLDING_YEARS = 1.0


class UnknownPropertyType(ValueError):
    """Raised when a property type has no depreciation schedule."""

    def __init__(self, value):
        super().__init__(f"UnknownPropertyType: {value!r}")
        self.value = value


class PropertyType(str, Enum):
    """Property types tracked in the portfolio."""

    single_family = "single-family"
    multi_family = "multi-family"
    condo = "condo"
    townhouse = "townhouse"
    commercial = "commercial"

    @classmethod
    def parse(cls, value) -> "PropertyType":
        """Coerce a string (or PropertyType) into a PropertyType."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownPropertyType(value) from None

    @property
    def is_commercial(self) -> bool:
        return self is PropertyType.commercial


@dataclass(frozen=True)
class ExpenseBreakdown:
    """Itemized expense categories. Monthly unless prefixed with annual."""

    monthly_mortgage: float = 0.0
    monthly_escrow: float = 0.0
    monthly_management_fees: float = 0.0
    monthly_association_fees: float = 0.0
    monthly_maintenance: float = 0.0
    monthly_heloc: float = 0.0
    monthly_other: float = 0.0
    annual_insurance: float = 0.0
    annual_property_taxes: float = 0.0

    def monthly_total(self, include_mortgage: bool = True) -> float:
        """Sum of all categories normalized to a monthly figure."""
        monthly = (
            self.monthly_heloc
            + self.monthly_management_fees
            + self.monthly_association_fees
            + self.monthly_maintenance
            + self.monthly_escrow
            + self.monthly_other
        )
        if include_mortgage:
            monthly += self.monthly_mortgage
        return monthly + (self.annual_insurance + self.annual_property_taxes) / 12


@dataclass(frozen=True)
class RateConfig:
    """Market assumptions for one jurisdiction."""

    appreciation_rate: float = 0.035
    inflation_rate: float = 0.025
    selling_cost_rate: float = 0.06
    capital_gains_tax_rate: float = 0.25
    mortgage_rate: float = 0.065
    country: str = "USA"


@dataclass(frozen=True)
class PropertyFacts:
    """Static facts about one property, as entered by the owner."""

    purchase_price: float
    current_value: float = 0.0
    down_payment: float = 0.0
    loan_amount: float = 0.0
    outstanding_balance: float = 0.0
    annual_interest_rate: float = 0.0
    loan_term_months: int = 0
    monthly_mortgage: float = 0.0
    months_elapsed: Optional[int] = None
    monthly_rent: float = 0.0
    monthly_rent_potential: float = 0.0
    is_investment_property: bool = True
    monthly_expenses: float = 0.0
    monthly_escrow: float = 0.0
    expense_breakdown: Optional[ExpenseBreakdown] = None
    avg_appreciation_rate: Optional[float] = None
    property_type: PropertyType = PropertyType.single_family
    cost_basis: Optional[float] = None
    tax_benefit_override: Optional[float] = None
    purchase_date: Optional[date] = None
    country: Optional[str] = None
    name: str = ""

    def __post_init__(self):
        # Frozen, so coerce through object.__setattr__
        object.__setattr__(self, "property_type", PropertyType.parse(self.property_type))

    @property
    def market_value(self) -> float:
        """Current value, falling back to purchase price when unknown."""
        return self.current_value if self.current_value > 0 else self.purchase_price

    @property
    def effective_cost_basis(self) -> float:
        if self.cost_basis is not None:
            return self.cost_basis
        return self.purchase_price * DEFAULT_COST_BASIS_RATIO

    @property
    def effective_monthly_rent(self) -> float:
        """Actual rent for investment properties, potential rent otherwise."""
        if self.is_investment_property:
            return self.monthly_rent or 0.0
        return self.monthly_rent_potential or 0.0

    @property
    def actual_monthly_rent(self) -> float:
        """Rent actually collected; zero for non-investment properties."""
        return (self.monthly_rent or 0.0) if self.is_investment_property else 0.0

    @property
    def total_monthly_expenses(self) -> float:
        """All monthly expenses, including any itemized mortgage payment."""
        if self.expense_breakdown is not None:
            return self.expense_breakdown.monthly_total()
        return self.monthly_expenses or 0.0

    @property
    def operating_monthly_expenses(self) -> float:
        """Monthly expenses excluding mortgage payments."""
        if self.expense_breakdown is not None:
            return self.expense_breakdown.monthly_total(include_mortgage=False)
        return self.monthly_expenses or 0.0

    def appreciation_rate(self, rates: RateConfig) -> float:
        """Property override, then jurisdiction rate, then the flat default."""
        if self.avg_appreciation_rate is not None:
            return self.avg_appreciation_rate
        if rates is not None and rates.appreciation_rate is not None:
            return rates.appreciation_rate
        return DEFAULT_APPRECIATION_RATE

    @property
    def loan_age_known(self) -> bool:
        """Whether months elapsed can be stated or derived from a purchase date."""
        return self.months_elapsed is not None or self.purchase_date is not None

    def elapsed_months(self, as_of: Optional[date] = None) -> int:
        """Months since loan start, derived from the purchase date if not given."""
        if self.months_elapsed is not None:
            return max(0, int(self.months_elapsed))
        if self.purchase_date is None:
            return 0
        delta = relativedelta(as_of or date.today(), self.purchase_date)
        return max(0, delta.years * 12 + delta.months)

    def years_held(self, as_of: Optional[date] = None) -> float:
        """Fractional years since purchase; one year when the date is unknown."""
        if self.purchase_date is None:
            return DEFAULT_HOLDING_YEARS
        days = ((as_of or date.today()) - self.purchase_date).days
        return max(0.0, days / 365)


@dataclass(frozen=True)
class TaxBenefitResult:
    """Annual tax benefits of holding a property."""

    annual_depreciation: float = 0.0
    mortgage_interest_deduction: float = 0.0
    property_tax_deduction: float = 0.0
    maintenance_deductions: float = 0.0
    total: float = 0.0
    is_override: bool = False


@dataclass(frozen=True)
class ExchangeOpportunity:
    """1031 exchange eligibility and the amounts involved."""

    eligible: bool
    deferred_gains: float
    minimum_replacement: float


@dataclass(frozen=True)
class CashFlowSeries:
    """Nominal annual cash flows: index 0 is the initial outlay."""

    flows: tuple = field(default_factory=tuple)

    def __len__(self):
        return len(self.flows)

    def __iter__(self):
        return iter(self.flows)

    def __getitem__(self, index):
        return self.flows[index]

    @property
    def initial_investment(self) -> float:
        return abs(self.flows[0]) if self.flows else 0.0
