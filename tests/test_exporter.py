import zipfile
from io import BytesIO

import pytest

from payslips.batch import BatchRecord, BatchStatus
from payslips.exceptions import ExportError
from payslips.exporter import (
    build_archive,
    export_archive,
    export_document,
    export_documents,
    payslip_filename,
    successful_entries,
)
from payslips.render import RenderedDocument

from conftest import make_input


def test_payslip_filename_replaces_whitespace():
    assert payslip_filename(make_input(full_name="Ayesha  Khan")) == "Payslip_Ayesha__Khan_December 2024.pdf"


def test_archive_has_one_entry_per_successful_record():
    records = []
    for name, status in (("Ayesha Khan", BatchStatus.SUCCEEDED), ("Bilal Ahmed", BatchStatus.FAILED), ("Sara Malik", BatchStatus.SUCCEEDED)):
        record = BatchRecord(payroll_input=make_input(full_name=name), status=status)
        if status is BatchStatus.SUCCEEDED:
            record.document = RenderedDocument(content=f"%PDF {name}".encode())
        records.append(record)

    archive = zipfile.ZipFile(BytesIO(build_archive(successful_entries(records))))

    assert archive.namelist() == [
        "Payslip_Ayesha_Khan_December 2024.pdf",
        "Payslip_Sara_Malik_December 2024.pdf",
    ]
    assert archive.read("Payslip_Sara_Malik_December 2024.pdf") == b"%PDF Sara Malik"


def test_archive_decodes_data_uris_and_appends_suffix():
    document = RenderedDocument(content=b"%PDF data")

    archive = zipfile.ZipFile(BytesIO(build_archive([("payslip", document.data_uri)])))

    assert archive.namelist() == ["payslip.pdf"]
    assert archive.read("payslip.pdf") == b"%PDF data"


def test_archive_skips_malformed_entries():
    good = RenderedDocument(content=b"%PDF good")

    archive = zipfile.ZipFile(BytesIO(build_archive([("broken.pdf", "not a data uri"), ("good.pdf", good)])))

    assert archive.namelist() == ["good.pdf"]


def test_archive_keeps_duplicate_names_distinct():
    document = RenderedDocument(content=b"%PDF")

    archive = zipfile.ZipFile(BytesIO(build_archive([("same.pdf", document), ("same.pdf", document)])))

    assert archive.namelist() == ["same.pdf", "same (2).pdf"]


def test_export_document_and_archive_write_files(tmp_path):
    document = RenderedDocument(content=b"%PDF single")

    single = export_document(document, tmp_path / "out" / "one.pdf")
    bundle = export_archive([("one.pdf", document)], tmp_path / "out" / "All_Payslips.zip")

    assert single.read_bytes() == b"%PDF single"
    assert zipfile.ZipFile(bundle).namelist() == ["one.pdf"]


def test_export_failure_raises_export_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")

    with pytest.raises(ExportError):
        export_archive([("one.pdf", RenderedDocument(content=b"%PDF"))], blocker / "All_Payslips.zip")


def test_payslip_filename_replaces_path_separators():
    name = payslip_filename(make_input(full_name="Ayesha/Khan", month="12\\2024"))

    assert name == "Payslip_Ayesha_Khan_12_2024.pdf"
    assert "/" not in name and "\\" not in name


def test_export_documents_keeps_duplicate_names_distinct(tmp_path):
    first = RenderedDocument(content=b"%PDF first")
    second = RenderedDocument(content=b"%PDF second")

    written = export_documents([("same.pdf", first), ("same.pdf", second), ("bad.pdf", "not a data uri")], tmp_path)

    assert [path.name for path in written] == ["same.pdf", "same (2).pdf"]
    assert (tmp_path / "same.pdf").read_bytes() == b"%PDF first"
    assert (tmp_path / "same (2).pdf").read_bytes() == b"%PDF second"
