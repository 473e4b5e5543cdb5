from __future__ import annotations

import csv
import io

import pytest

from becs_portal.errors import ValidationError
from becs_portal.schemas import ImportType
from becs_portal.services.bulk_import import LAYOUTS, generate_template, normalise_header, parse_csv


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("firstName", "first_name"),
        ("First Name", "first_name"),
        ("first-name", "first_name"),
        ("  EMAIL ", "email"),
        ("Assignee", "assigned_to"),
        ("target_completion_date", "target_date"),
    ],
)
def test_normalise_header(raw: str, expected: str) -> None:
    assert normalise_header(raw) == expected


@pytest.mark.parametrize("import_type", list(ImportType))
def test_templates_carry_every_column_and_an_example(import_type: ImportType) -> None:
    rows = list(csv.reader(io.StringIO(generate_template(import_type))))

    assert rows[0] == list(LAYOUTS[import_type].columns)
    assert len(rows) == 2
    assert len(rows[1]) == len(rows[0])


def test_parse_csv_normalises_headers_and_skips_blank_rows() -> None:
    content = "\ufeffTitle,Project Code,Is Weekly Deliverable\n Draft ,P1, yes \n,,\n"

    rows = parse_csv(ImportType.TASKS, content)

    assert rows == [{"title": "Draft", "project_code": "P1", "is_weekly_deliverable": "yes"}]


def test_parse_csv_reports_missing_required_columns() -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_csv(ImportType.STAFF, "first_name,email\nAda,ada@example.com\n")

    assert "last_name" in excinfo.value.details["fields"]["csv_data"][0]
    assert "password" in excinfo.value.details["fields"]["csv_data"][0]
