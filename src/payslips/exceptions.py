from __future__ import annotations


class PayslipError(Exception):
    """Base class for payslip pipeline errors."""


class IngestError(PayslipError):
    """The source table is malformed or incomplete; nothing was ingested."""


class MissingFieldError(PayslipError):
    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}")
        self.field_name = field_name


class AssetFetchError(PayslipError):
    """An image asset could not be fetched."""


class ExportError(PayslipError):
    """A document or archive could not be written."""
