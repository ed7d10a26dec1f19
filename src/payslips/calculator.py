from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Optional

from .config import Settings
from .exceptions import MissingFieldError
from .logging import get_logger
from .models import (
    DEDUCTION_COLUMNS,
    EARNING_COLUMNS,
    IDENTITY_COLUMNS,
    CalculatedPayrollRecord,
    EmployerProfile,
    RawPayrollInput,
)
from .words import to_words

logger = get_logger(__name__)


def parse_amount(value: Optional[str]) -> float:
    """Coerce a spreadsheet amount to a float; blank or non-numeric text counts as zero."""
    if value is None:
        return 0.0
    text = str(value).strip().replace(",", "")
    if not text:
        return 0.0
    try:
        amount = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


def format_pay_date(moment: datetime) -> str:
    return moment.strftime("%d/%m/%Y")


class PayrollCalculator:
    def __init__(
        self,
        employer: EmployerProfile,
        currency_code: str = "PKR",
        payment_details: str = "Payment made to employee's bank account.",
        footer_note: str = "This is a system generated payslip.",
    ):
        self.employer = employer
        self.currency_code = currency_code
        self.payment_details = payment_details
        self.footer_note = footer_note

    @classmethod
    def from_settings(cls, settings: Settings) -> "PayrollCalculator":
        return cls(
            employer=settings.employer_profile(),
            currency_code=settings.currency_code,
            payment_details=settings.payment_details,
            footer_note=settings.footer_note,
        )

    @staticmethod
    def _sum_amounts(payroll_input: RawPayrollInput, attributes: Iterable[str]) -> float:
        return round(sum(parse_amount(getattr(payroll_input, attribute)) for attribute in attributes), 2)

    @staticmethod
    def _check_identity(payroll_input: RawPayrollInput) -> None:
        for column, attribute in IDENTITY_COLUMNS.items():
            if getattr(payroll_input, attribute, None) is None:
                raise MissingFieldError(column)

    def words_for(self, net_payable: float) -> str:
        return f"{to_words(math.floor(net_payable))} {self.currency_code}"

    def calculate(self, payroll_input: RawPayrollInput, now: Optional[datetime] = None) -> CalculatedPayrollRecord:
        self._check_identity(payroll_input)
        moment = now or datetime.now()

        total_earnings = self._sum_amounts(payroll_input, EARNING_COLUMNS.values())
        total_deductions = self._sum_amounts(payroll_input, DEDUCTION_COLUMNS.values())
        net_payable = round(total_earnings - total_deductions, 2)

        record = CalculatedPayrollRecord(
            employee=payroll_input,
            pay_date=format_pay_date(moment),
            pay_period=payroll_input.month,
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_payable=net_payable,
            net_payable_in_words=self.words_for(net_payable),
            employer=self.employer,
            currency_code=self.currency_code,
            payment_details=self.payment_details,
            footer_note=self.footer_note,
        )
        logger.debug(
            "payslip_calculated",
            employee=payroll_input.full_name,
            month=payroll_input.month,
            net_payable=net_payable,
        )
        return record
