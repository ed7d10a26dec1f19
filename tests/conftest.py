from datetime import datetime
from io import BytesIO

import pytest
import structlog
from PIL import Image

from payslips.calculator import PayrollCalculator
from payslips.exceptions import AssetFetchError
from payslips.layout import DocumentLayoutEngine
from payslips.models import EmployerProfile, RawPayrollInput

FIXED_NOW = datetime(2024, 12, 31, 9, 30)


def make_input(**overrides) -> RawPayrollInput:
    values = dict(
        month="December 2024",
        full_name="Ayesha Khan",
        cnic_number="42101-1234567-1",
        designation="Software Engineer",
        date_of_joining="01/03/2022",
        gross_salary="10000",
        bonus_commission="2000",
        increment="500",
        reimbursement_amount="0",
        compensation="0",
        adjustments="0",
        absents_deduction="0",
        lates_deduction="0",
        other_deductions="0",
        payroll_tax_deduction="0",
    )
    values.update(overrides)
    return RawPayrollInput(**values)


def missing_asset(url: str) -> bytes:
    raise AssetFetchError(f"Asset not found at {url}")


@pytest.fixture(autouse=True)
def _reset_structlog():
    # configure_logging binds structlog to pytest's per-test captured stderr;
    # restore defaults so later tests don't write to a closed stream.
    yield
    structlog.reset_defaults()


@pytest.fixture
def employer() -> EmployerProfile:
    return EmployerProfile(
        name="ROBUST SUPPORT & SOLUTIONS",
        address="Office No.501A, Fortune Tower, PECHS Block 6, Karachi, Pakistan",
        phone="0311-3859635",
        logo_url="/Logo.jpg",
    )


@pytest.fixture
def calculator(employer) -> PayrollCalculator:
    return PayrollCalculator(employer)


@pytest.fixture
def engine() -> DocumentLayoutEngine:
    return DocumentLayoutEngine(fetch_asset=missing_asset)


@pytest.fixture
def logo_png() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (200, 100), (48, 71, 94)).save(buffer, format="PNG")
    return buffer.getvalue()
