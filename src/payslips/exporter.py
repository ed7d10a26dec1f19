from __future__ import annotations

import re
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

from .batch import BatchRecord, BatchStatus
from .exceptions import ExportError
from .logging import get_logger
from .models import RawPayrollInput
from .render import RenderedDocument

logger = get_logger(__name__)

ArchiveEntry = Tuple[str, Union[RenderedDocument, str]]


def _safe_part(text: str) -> str:
    return re.sub(r"[\s/\\]", "_", str(text))


def payslip_filename(payroll_input: RawPayrollInput) -> str:
    return f"Payslip_{_safe_part(payroll_input.full_name)}_{_safe_part(payroll_input.month)}.pdf"


def _pdf_name(filename: str) -> str:
    return filename if filename.lower().endswith(".pdf") else f"{filename}.pdf"


def _unique_name(filename: str, used: Dict[str, int]) -> str:
    count = used.get(filename.lower(), 0) + 1
    used[filename.lower()] = count
    if count == 1:
        return filename
    stem = filename[: -len(".pdf")]
    return f"{stem} ({count}).pdf"


def _payload(document: Union[RenderedDocument, str]) -> bytes:
    if isinstance(document, RenderedDocument):
        return document.content
    return RenderedDocument.from_data_uri(document).content


def successful_entries(records: Iterable[BatchRecord]) -> List[ArchiveEntry]:
    return [
        (payslip_filename(record.payroll_input), record.document)
        for record in records
        if record.status is BatchStatus.SUCCEEDED and record.document is not None
    ]


def export_document(document: RenderedDocument, output_path: Path) -> Path:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(document.content)
    except OSError as exc:
        raise ExportError(f"Could not save {output_path}: {exc}") from exc
    return output_path


def export_documents(entries: Iterable[ArchiveEntry], directory: Path) -> List[Path]:
    """Write each entry as its own PDF in ``directory``, renaming duplicates like the archive does."""
    used: Dict[str, int] = {}
    written: List[Path] = []
    for filename, document in entries:
        try:
            content = _payload(document)
        except ValueError as exc:
            logger.warning("archive_entry_skipped", filename=filename, error=str(exc))
            continue
        path = directory / _unique_name(_pdf_name(filename), used)
        written.append(export_document(RenderedDocument(content=content), path))
    return written


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    buffer = BytesIO()
    used: Dict[str, int] = {}
    try:
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for filename, document in entries:
                try:
                    content = _payload(document)
                except ValueError as exc:
                    logger.warning("archive_entry_skipped", filename=filename, error=str(exc))
                    continue
                archive.writestr(_unique_name(_pdf_name(filename), used), content)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as exc:
        raise ExportError(f"Could not create archive: {exc}") from exc
    return buffer.getvalue()


def export_archive(entries: Iterable[ArchiveEntry], output_path: Path) -> Path:
    content = build_archive(entries)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(content)
    except OSError as exc:
        raise ExportError(f"Could not save {output_path}: {exc}") from exc
    return output_path
