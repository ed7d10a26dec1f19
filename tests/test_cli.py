import json
import zipfile

import pytest
from openpyxl import Workbook

from payslips import cli
from payslips.config import get_settings
from payslips.ingest import EXPECTED_COLUMNS
from payslips.layout import DocumentLayoutEngine


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    monkeypatch.setenv("PAYSLIP_LOGO_URL", "")
    monkeypatch.setenv("PAYSLIP_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def write_workbook(path, names):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(EXPECTED_COLUMNS)
    for name in names:
        row = {column: 0 for column in EXPECTED_COLUMNS}
        row.update(
            {
                "Month": "December 2024",
                "Full Name": name,
                "CNIC Number": "42101-1234567-1",
                "Designation": "Engineer",
                "Date Of Joining": "01/03/2022",
                "Gross Salary": 50000,
                "Payroll Tax Deduction": 4500,
            }
        )
        sheet.append([row[column] for column in EXPECTED_COLUMNS])
    workbook.save(path)
    return path


def test_preview_prints_calculated_totals(capsys, tmp_path):
    sheet = write_workbook(tmp_path / "payroll.xlsx", ["Ayesha Khan"])

    assert cli.main(["preview", str(sheet)]) == 0

    (record,) = json.loads(capsys.readouterr().out)
    assert record["employee"]["Full Name"] == "Ayesha Khan"
    assert record["total_earnings"] == 50000.0
    assert record["total_deductions"] == 4500.0
    assert record["net_payable"] == 45500.0
    assert record["net_payable_in_words"] == "Forty Five Thousand Five Hundred PKR"


def test_generate_writes_archive_and_reports_failures(capsys, tmp_path, monkeypatch):
    sheet = write_workbook(tmp_path / "payroll.xlsx", ["Ayesha Khan", "Bilal Ahmed", "Sara Malik"])
    original_layout = DocumentLayoutEngine.layout

    def flaky_layout(self, record):
        if record.employee.full_name == "Bilal Ahmed":
            raise RuntimeError("layout exploded")
        return original_layout(self, record)

    monkeypatch.setattr(DocumentLayoutEngine, "layout", flaky_layout)
    output = tmp_path / "All_Payslips.zip"

    assert cli.main(["generate", str(sheet), "--output", str(output)]) == 0

    out = capsys.readouterr().out
    assert "2 payslips generated. 1 failed." in out
    assert "failed: Bilal Ahmed (December 2024): layout exploded" in out
    assert zipfile.ZipFile(output).namelist() == [
        "Payslip_Ayesha_Khan_December 2024.pdf",
        "Payslip_Sara_Malik_December 2024.pdf",
    ]


def test_generate_to_directory_for_selected_employee(capsys, tmp_path):
    sheet = write_workbook(tmp_path / "payroll.xlsx", ["Ayesha Khan", "Bilal Ahmed"])
    output = tmp_path / "pdfs"

    assert cli.main(["generate", str(sheet), "--output", str(output), "--employee", "bilal ahmed"]) == 0

    assert [path.name for path in output.iterdir()] == ["Payslip_Bilal_Ahmed_December 2024.pdf"]
    assert (output / "Payslip_Bilal_Ahmed_December 2024.pdf").read_bytes().startswith(b"%PDF")
    assert "1 payslips generated. 0 failed." in capsys.readouterr().out


def test_ingest_errors_exit_non_zero(capsys, tmp_path):
    bad = tmp_path / "payroll.txt"
    bad.write_text("Month,Full Name\n")

    assert cli.main(["preview", str(bad)]) == 1
    assert "Unsupported payroll file format" in capsys.readouterr().err


def test_unknown_employee_exits_non_zero(capsys, tmp_path):
    sheet = write_workbook(tmp_path / "payroll.xlsx", ["Ayesha Khan"])

    assert cli.main(["generate", str(sheet), "--output", str(tmp_path / "out.zip"), "--employee", "Nobody"]) == 1
    assert "No rows found for employee(s): Nobody" in capsys.readouterr().err
    assert not (tmp_path / "out.zip").exists()


def test_generate_to_directory_keeps_duplicate_employees(capsys, tmp_path):
    sheet = write_workbook(tmp_path / "payroll.xlsx", ["Ayesha Khan", "Ayesha Khan"])
    output = tmp_path / "pdfs"

    assert cli.main(["generate", str(sheet), "--output", str(output)]) == 0

    assert sorted(path.name for path in output.iterdir()) == [
        "Payslip_Ayesha_Khan_December 2024 (2).pdf",
        "Payslip_Ayesha_Khan_December 2024.pdf",
    ]
    assert "2 payslips generated. 0 failed." in capsys.readouterr().out
