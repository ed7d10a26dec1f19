from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Spreadsheet column -> RawPayrollInput attribute. Column names are the exact
# headers of the payroll sheet, including its "Reimbursment" spelling.
IDENTITY_COLUMNS: Dict[str, str] = {
    "Month": "month",
    "Full Name": "full_name",
    "CNIC Number": "cnic_number",
    "Designation": "designation",
    "Date Of Joining": "date_of_joining",
}
EARNING_COLUMNS: Dict[str, str] = {
    "Gross Salary": "gross_salary",
    "Bonus / Commission": "bonus_commission",
    "Increment": "increment",
    "Reimbursment Amount": "reimbursement_amount",
    "Compensation": "compensation",
    "Adjustments": "adjustments",
}
DEDUCTION_COLUMNS: Dict[str, str] = {
    "Absents Deduction": "absents_deduction",
    "Lates Deduction": "lates_deduction",
    "Other Deductions": "other_deductions",
    "Payroll Tax Deduction": "payroll_tax_deduction",
}
COLUMN_FIELDS: Dict[str, str] = {**IDENTITY_COLUMNS, **EARNING_COLUMNS, **DEDUCTION_COLUMNS}

# Line items as printed on the payslip, in print order.
EARNING_LINE_ITEMS: Tuple[Tuple[str, str], ...] = (
    ("Gross Salary", "gross_salary"),
    ("Bonus / Commission", "bonus_commission"),
    ("Reimbursement", "reimbursement_amount"),
    ("Increment", "increment"),
    ("Compensation", "compensation"),
    ("Adjustments", "adjustments"),
)
DEDUCTION_LINE_ITEMS: Tuple[Tuple[str, str], ...] = (
    ("Absents Deduction", "absents_deduction"),
    ("Lates Deduction", "lates_deduction"),
    ("Payroll Tax Deduction", "payroll_tax_deduction"),
    ("Other Deductions", "other_deductions"),
)


@dataclass(frozen=True)
class RawPayrollInput:
    """One employee-month row. Every value is text exactly as ingested."""

    month: str
    full_name: str
    cnic_number: str
    designation: str
    date_of_joining: str
    gross_salary: str = "0"
    bonus_commission: str = "0"
    increment: str = "0"
    reimbursement_amount: str = "0"
    compensation: str = "0"
    adjustments: str = "0"
    absents_deduction: str = "0"
    lates_deduction: str = "0"
    other_deductions: str = "0"
    payroll_tax_deduction: str = "0"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawPayrollInput":
        values: Dict[str, Any] = {}
        for column, attribute in COLUMN_FIELDS.items():
            value = row.get(column)
            if value is None:
                if column in IDENTITY_COLUMNS:
                    values[attribute] = None
                continue
            values[attribute] = str(value).strip()
        return cls(**values)

    def to_row(self) -> Dict[str, str]:
        return {column: getattr(self, attribute) for column, attribute in COLUMN_FIELDS.items()}

    def amounts(self, line_items: Tuple[Tuple[str, str], ...]) -> List[Tuple[str, str]]:
        return [(label, getattr(self, attribute)) for label, attribute in line_items]


@dataclass(frozen=True)
class EmployerProfile:
    name: str
    address: str
    phone: str
    logo_url: Optional[str] = None


@dataclass(frozen=True)
class CalculatedPayrollRecord:
    employee: RawPayrollInput
    pay_date: str
    pay_period: str
    total_earnings: float
    total_deductions: float
    net_payable: float
    net_payable_in_words: str
    employer: EmployerProfile
    currency_code: str = "PKR"
    payment_details: str = "Payment made to employee's bank account."
    footer_note: str = "This is a system generated payslip."

    @property
    def logo_url(self) -> Optional[str]:
        return self.employer.logo_url

    def to_dict(self) -> Dict[str, Any]:
        payload = {field.name: getattr(self, field.name) for field in fields(self)}
        payload["employee"] = self.employee.to_row()
        payload["employer"] = asdict(self.employer)
        return payload
