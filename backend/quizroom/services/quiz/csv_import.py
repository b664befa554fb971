"""Parse delimited question text into raw question items.

Each non-blank line holds six columns: title, four options and the correct
option as a number from 1 to 4. Values may be double-quoted to embed commas.
Quoting follows the ``csv`` module: a doubled quote inside a quoted value is
a literal ``"``, so ``"Say ""hi""\"`` reads as ``Say "hi"``. The browser
client's hand-rolled splitter drops every quote character instead.
"""

import csv
from typing import Dict, List

from .errors import EmptyBank, InvalidQuestion

CSV_COLUMNS = 6


def parse_question_csv(text: str) -> List[Dict]:
    lines = [line.strip() for line in (text or '').splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        raise EmptyBank('CSV is empty')

    parsed = []
    for line_no, cols in enumerate(csv.reader(lines, skipinitialspace=True), start=1):
        cols = [c.strip() for c in cols]
        if len(cols) != CSV_COLUMNS:
            raise InvalidQuestion(line_no, 'columns', f'Line {line_no}: expected {CSV_COLUMNS} columns')

        title, a, b, c, d, correct_raw = cols
        try:
            correct_human = int(correct_raw)
        except ValueError:
            raise InvalidQuestion(line_no, 'correctOptionIndex')
        if not 1 <= correct_human <= 4:
            raise InvalidQuestion(line_no, 'correctOptionIndex')

        parsed.append({
            'title': title,
            'options': [a, b, c, d],
            'correctOptionIndex': correct_human - 1,
        })
    return parsed
