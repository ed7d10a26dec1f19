from .batch import BatchCoordinator, BatchRecord, BatchStatus, BatchSummary
from .calculator import PayrollCalculator
from .layout import DocumentLayoutEngine
from .models import CalculatedPayrollRecord, EmployerProfile, RawPayrollInput
from .words import to_words

__all__ = [
    "BatchCoordinator",
    "BatchRecord",
    "BatchStatus",
    "BatchSummary",
    "CalculatedPayrollRecord",
    "DocumentLayoutEngine",
    "EmployerProfile",
    "PayrollCalculator",
    "RawPayrollInput",
    "to_words",
]
