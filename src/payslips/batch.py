from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .calculator import PayrollCalculator
from .layout import DocumentLayoutEngine
from .logging import get_logger, payslip_context
from .models import CalculatedPayrollRecord, RawPayrollInput
from .render import RenderedDocument

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class BatchStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class BatchRecord:
    payroll_input: RawPayrollInput
    status: BatchStatus = BatchStatus.PENDING
    document: Optional[RenderedDocument] = None
    calculated: Optional[CalculatedPayrollRecord] = None
    error: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.payroll_input.full_name} ({self.payroll_input.month})"

    def start(self) -> None:
        self.status = BatchStatus.GENERATING
        self.document = None
        self.calculated = None
        self.error = None

    def succeed(self, calculated: CalculatedPayrollRecord, document: RenderedDocument) -> None:
        self.status = BatchStatus.SUCCEEDED
        self.calculated = calculated
        self.document = document

    def fail(self, message: str) -> None:
        self.status = BatchStatus.FAILED
        self.error = message


@dataclass
class BatchSummary:
    records: List[BatchRecord] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for record in self.records if record.status is BatchStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return sum(1 for record in self.records if record.status is BatchStatus.FAILED)

    @property
    def total(self) -> int:
        return len(self.records)

    def failures(self) -> List[BatchRecord]:
        return [record for record in self.records if record.status is BatchStatus.FAILED]


class BatchCoordinator:
    """Run calculate + layout over payroll rows one at a time, isolating failures per row."""

    def __init__(
        self,
        calculator: PayrollCalculator,
        layout_engine: DocumentLayoutEngine,
        clock: Clock = datetime.now,
    ):
        self.calculator = calculator
        self.layout_engine = layout_engine
        self.clock = clock

    def generate_one(self, record: RawPayrollInput | BatchRecord) -> BatchRecord:
        batch_record = record if isinstance(record, BatchRecord) else BatchRecord(payroll_input=record)
        batch_record.start()
        payroll_input = batch_record.payroll_input
        with payslip_context(employee=str(payroll_input.full_name), month=str(payroll_input.month)):
            try:
                calculated = self.calculator.calculate(payroll_input, now=self.clock())
                document = self.layout_engine.layout(calculated)
            except Exception as exc:
                message = str(exc) or exc.__class__.__name__
                logger.exception("payslip_generation_failed", error=message)
                batch_record.fail(message)
            else:
                batch_record.succeed(calculated, document)
        return batch_record

    def generate_all(self, records: Iterable[RawPayrollInput | BatchRecord]) -> BatchSummary:
        summary = BatchSummary(
            records=[record if isinstance(record, BatchRecord) else BatchRecord(payroll_input=record) for record in records]
        )
        for batch_record in summary.records:
            self.generate_one(batch_record)
        logger.info(
            "batch_generation_complete",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
        )
        return summary
