"""Monthly payroll deductions and net pay."""

from __future__ import annotations

from dataclasses import dataclass

from krnetpay.backend.config.engine_config import DeductionRates, load_engine_configuration


@dataclass(frozen=True, slots=True)
class DeductionBreakdown:
    """Itemised result of a single net pay calculation."""

    gross_monthly: float
    dependents: int
    national_pension: float
    health_insurance: float
    long_term_care_insurance: float
    employment_insurance: float
    tax_base: float
    tax_rate: float
    dependent_deduction: float
    income_tax: float
    local_income_tax: float
    net_monthly: float

    @property
    def social_insurance(self) -> float:
        return (
            self.national_pension
            + self.health_insurance
            + self.long_term_care_insurance
            + self.employment_insurance
        )

    @property
    def total_deductions(self) -> float:
        return self.social_insurance + self.income_tax + self.local_income_tax

    @property
    def gross_annual(self) -> float:
        return self.gross_monthly * 12

    @property
    def net_annual(self) -> float:
        return self.net_monthly * 12

    def items(self) -> dict[str, float]:
        """Return the six deductions keyed by name, in payslip order."""

        return {
            "national_pension": self.national_pension,
            "health_insurance": self.health_insurance,
            "long_term_care_insurance": self.long_term_care_insurance,
            "employment_insurance": self.employment_insurance,
            "income_tax": self.income_tax,
            "local_income_tax": self.local_income_tax,
        }


def compute_net(
    gross_monthly: float,
    dependents: int = 1,
    rates: DeductionRates | None = None,
) -> DeductionBreakdown:
    """Return the deduction breakdown for ``gross_monthly``.

    Long-term care insurance is charged on top of the health premium but is
    not subtracted when deriving the tax base. The dependent deduction is
    ``dependent_deduction * (dependents - 1)`` and is applied after the
    bracket rate; a count below one therefore raises the tax. Income tax is
    floored at zero.
    """

    if rates is None:
        rates = load_engine_configuration().deductions

    national_pension = gross_monthly * rates.national_pension_rate
    health_insurance = gross_monthly * rates.health_insurance_rate
    long_term_care = health_insurance * rates.long_term_care_ratio
    employment_insurance = gross_monthly * rates.employment_insurance_rate

    tax_base = gross_monthly - (national_pension + health_insurance + employment_insurance)
    dependent_deduction = rates.dependent_deduction * (dependents - 1)

    tax_rate = rates.rate_for_tax_base(tax_base)
    income_tax = max(0.0, tax_base * tax_rate - dependent_deduction)
    local_income_tax = income_tax * rates.local_income_tax_ratio

    net_monthly = gross_monthly - (
        national_pension
        + health_insurance
        + long_term_care
        + employment_insurance
        + income_tax
        + local_income_tax
    )

    return DeductionBreakdown(
        gross_monthly=gross_monthly,
        dependents=dependents,
        national_pension=national_pension,
        health_insurance=health_insurance,
        long_term_care_insurance=long_term_care,
        employment_insurance=employment_insurance,
        tax_base=tax_base,
        tax_rate=tax_rate,
        dependent_deduction=dependent_deduction,
        income_tax=income_tax,
        local_income_tax=local_income_tax,
        net_monthly=net_monthly,
    )


__all__ = ["DeductionBreakdown", "compute_net"]
