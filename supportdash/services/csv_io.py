import csv
import io
import re
from typing import List, Sequence

from supportdash.schemas.testing import TestCase, TestResult

QUESTION_HEADER = re.compile(r"pregunta|question|query", re.IGNORECASE)
EXPECTED_HEADER = re.compile(r"esperada|expected|answer|respuesta", re.IGNORECASE)

EXPORT_HEADERS = ["#", "Pregunta", "Respuesta Esperada", "Respuesta del Agente", "Estado", "Razón", "Latencia (ms)"]


def _clean(cell: str) -> str:
    return re.sub(r"^[\"']|[\"']$", "", cell).strip()


def _cell(cols: List[str], idx: int) -> str:
    return cols[idx] if 0 <= idx < len(cols) else ""


def parse_test_cases_csv(text: str) -> List[TestCase]:
    """
    Accepts ';' or ',' separated files (decided from the first line).
    With a "Pregunta"/"Question" header the matching columns are used, otherwise
    every line is data: column 0 is the question, column 1 the expected answer.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    sep = ";" if ";" in lines[0] else ","
    rows = [[_clean(c) for c in row] for row in csv.reader(lines, delimiter=sep)]

    headers = rows[0]
    question_idx = next((i for i, h in enumerate(headers) if QUESTION_HEADER.search(h)), -1)
    expected_idx = next((i for i, h in enumerate(headers) if EXPECTED_HEADER.search(h)), -1)

    if question_idx == -1:
        return [TestCase(question=_cell(cols, 0), expected=_cell(cols, 1)) for cols in rows]

    return [
        TestCase(question=_cell(cols, question_idx), expected=_cell(cols, expected_idx))
        for cols in rows[1:]
    ]


def export_results_csv(results: Sequence[TestResult]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

    writer.writerow(EXPORT_HEADERS)
    for r in results:
        writer.writerow([
            r.index,
            r.question,
            r.expected,
            r.response,
            r.status.value,
            r.reason,
            r.latency_ms,
        ])

    return output.getvalue()
