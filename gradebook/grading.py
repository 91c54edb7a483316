"""Grade band classification and the grade notification intent."""

from typing import Callable, List, NamedTuple

from gradebook.models import Band, NotificationIntent, Thresholds
from gradebook.notification_templates import GRADE_COPY, GRADES_TAG
from gradebook.parsers import format_grade


class GradeRule(NamedTuple):
    band: Band
    predicate: Callable[[float, Thresholds], bool]
    title: str
    body: str


# Checked top to bottom, first match wins, so a grade sitting exactly on a
# cut-off gets the higher band. Thresholds are not assumed to be ordered.
GRADE_RULES: List[GradeRule] = [
    GradeRule(Band.A_PLUS, lambda grade, t: grade >= t.a_plus, *GRADE_COPY[Band.A_PLUS]),
    GradeRule(Band.B_PLUS, lambda grade, t: grade >= t.b_plus, *GRADE_COPY[Band.B_PLUS]),
    GradeRule(Band.C_PLUS, lambda grade, t: grade >= t.c_plus, *GRADE_COPY[Band.C_PLUS]),
    GradeRule(Band.OTHER, lambda grade, t: True, *GRADE_COPY[Band.OTHER]),
]


def match_rule(new_grade: float, thresholds: Thresholds) -> GradeRule:
    for rule in GRADE_RULES:
        if rule.predicate(new_grade, thresholds):
            return rule
    # the last rule always matches
    return GRADE_RULES[-1]


def classify(new_grade: float, thresholds: Thresholds) -> Band:
    """
    Classify a grade into one of the four bands.

    Args:
        new_grade: Grade percentage
        thresholds: Current A+/B+/C+ cut-offs

    Returns:
        The first band, in A+ → B+ → C+ → other order, whose cut-off the grade meets
    """
    return match_rule(new_grade, thresholds).band


def evaluate(new_grade: float, thresholds: Thresholds, sound: str = "default") -> NotificationIntent:
    """Build the immediate notification for a grade that was just set."""
    rule = match_rule(new_grade, thresholds)
    grade_text = format_grade(new_grade)
    return NotificationIntent(
        title=rule.title,
        body=rule.body.format(grade=grade_text),
        tag=GRADES_TAG,
        sound=sound,
        data={'band': rule.band.value, 'grade': grade_text},
    )
