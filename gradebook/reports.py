"""Tabular roster reports: band summary and CSV export."""

from typing import Dict, Sequence

import pandas as pd

from gradebook.grading import classify
from gradebook.models import Band, Student, Thresholds

BAND_LABELS = {
    Band.A_PLUS: 'A+',
    Band.B_PLUS: 'B+',
    Band.C_PLUS: 'C+',
    Band.OTHER: 'Other',
}

COLUMNS = ['Student ID', 'Student Name', 'Grade %', 'Band']


def roster_frame(students: Sequence[Student], thresholds: Thresholds) -> pd.DataFrame:
    """One row per student, in roster order, with the band the grade falls in."""
    rows = [
        {
            'Student ID': s.id,
            'Student Name': s.name,
            'Grade %': s.grade,
            'Band': BAND_LABELS[classify(s.grade, thresholds)],
        }
        for s in students
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def band_summary(frame: pd.DataFrame) -> Dict[str, int]:
    """Count of students per band plus a 'Total'."""
    counts = frame['Band'].value_counts()
    summary = {label: int(counts.get(label, 0)) for label in BAND_LABELS.values()}
    summary['Total'] = len(frame)
    return summary


def roster_csv(frame: pd.DataFrame) -> str:
    return frame.to_csv(index=False, float_format="%.2f")
