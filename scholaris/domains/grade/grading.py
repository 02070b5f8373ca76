# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading scale and GPA arithmetic.

Pure functions shared by quiz scoring, grade summaries and transcripts.

Example:
    >>> letter_to_points("B+")
    3.3
    >>> percentage_to_letter(91.5)
    'A-'
    >>> weighted_gpa([GPAEntry("A", credits=3), GPAEntry("C", credits=1)])
    3.5
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

GRADE_POINTS: dict[str, float] = {
    "A+": 4.0,
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "D-": 0.7,
    "F": 0.0,
}

# (minimum percentage, letter), highest first
PERCENTAGE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)


@dataclass(frozen=True)
class GPAEntry:
    """One grade contributing to a GPA.

    Attributes:
        letter_grade: Letter on the 4.0 scale.
        credits: Credit hours of the course.
        weight: Relative weight of the grade within the course.
    """

    letter_grade: str
    credits: float = 1.0
    weight: float = 1.0


def round2(value: float) -> float:
    """Round half-up to two decimals."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def letter_to_points(letter: str | None) -> float:
    """Convert a letter grade to grade points.

    Unknown or missing letters count as 0.0.
    """
    if not letter:
        return 0.0
    return GRADE_POINTS.get(letter.strip().upper(), 0.0)


def percentage_to_letter(percentage: float) -> str:
    """Convert a percentage score to a letter grade."""
    for minimum, letter in PERCENTAGE_THRESHOLDS:
        if percentage >= minimum:
            return letter
    return "F"


def calculate_percentage(score: float, max_points: float) -> float:
    """Score as a percentage of max points, rounded to two decimals."""
    if max_points <= 0:
        return 0.0
    return round2(score / max_points * 100)


def weighted_gpa(entries: list[GPAEntry]) -> float:
    """Credit- and weight-weighted GPA.

    Missing or non-positive credits and weights count as 1.

    Returns:
        GPA rounded to two decimals, 0.0 when there are no entries.
    """
    total_points = 0.0
    total_weight = 0.0

    for entry in entries:
        credits = entry.credits if entry.credits and entry.credits > 0 else 1.0
        weight = entry.weight if entry.weight and entry.weight > 0 else 1.0
        factor = credits * weight
        total_points += letter_to_points(entry.letter_grade) * factor
        total_weight += factor

    if total_weight == 0:
        return 0.0
    return round2(total_points / total_weight)
