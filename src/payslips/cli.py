from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from .assets import AssetFetcher
from .batch import BatchCoordinator
from .calculator import PayrollCalculator
from .config import get_settings
from .exceptions import ExportError, IngestError
from .exporter import export_archive, export_documents, successful_entries
from .ingest import load_payroll_file
from .layout import DocumentLayoutEngine
from .logging import configure_logging


def build_coordinator() -> BatchCoordinator:
    settings = get_settings()
    engine = DocumentLayoutEngine(fetch_asset=AssetFetcher(base_dir=settings.asset_dir))
    return BatchCoordinator(PayrollCalculator.from_settings(settings), engine)


def cmd_preview(args: argparse.Namespace) -> None:
    calculator = PayrollCalculator.from_settings(get_settings())
    now = datetime.now()
    records = [calculator.calculate(item, now=now).to_dict() for item in load_payroll_file(Path(args.file))]
    print(json.dumps(records, default=str, indent=2))


def cmd_generate(args: argparse.Namespace) -> None:
    inputs = load_payroll_file(Path(args.file))
    if args.employee:
        wanted = {name.strip().lower() for name in args.employee}
        inputs = [item for item in inputs if item.full_name.strip().lower() in wanted]
        if not inputs:
            raise IngestError(f"No rows found for employee(s): {', '.join(args.employee)}")

    summary = build_coordinator().generate_all(inputs)
    output_path = Path(args.output)
    entries = successful_entries(summary.records)
    if output_path.suffix.lower() == ".zip":
        if entries:
            export_archive(entries, output_path)
            print(f"Payslips archived to {output_path}")
        else:
            print("No payslips were generated successfully; archive not written")
    elif export_documents(entries, output_path):
        print(f"Payslips exported to {output_path}")

    print(f"{summary.succeeded} payslips generated. {summary.failed} failed.")
    for record in summary.failures():
        print(f"  failed: {record.label}: {record.error}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate employee payslips from a payroll spreadsheet")
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview_cmd = subparsers.add_parser("preview", help="Print calculated payslip totals as JSON")
    preview_cmd.add_argument("file", help="Payroll sheet (.xlsx or .csv)")
    preview_cmd.set_defaults(func=cmd_preview)

    generate_cmd = subparsers.add_parser("generate", help="Generate payslip PDFs")
    generate_cmd.add_argument("file", help="Payroll sheet (.xlsx or .csv)")
    generate_cmd.add_argument(
        "--output",
        default=get_settings().archive_name,
        help="Zip archive path, or a directory for one PDF per employee",
    )
    generate_cmd.add_argument("--employee", action="append", help="Only generate for this full name")
    generate_cmd.set_defaults(func=cmd_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (IngestError, ExportError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
