"""
MOTIONCOACH Motion Service - Form Evaluator

Penalty-based form scoring shared by every exercise analyzer. A frame starts
at 100, each violated rule subtracts a fixed penalty, and the clamped score is
banded into good / warn / bad. The band drives the consecutive-warning and
consecutive-bad-form counters kept on the analyzer state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
from enum import Enum

from .exercise_catalog import FormMessage


MAX_SCORE = 100.0
GOOD_FORM_MIN_SCORE = 80.0
WARN_FORM_MIN_SCORE = 50.0


class FormQuality(Enum):
    """Form quality bands."""
    GOOD = "good"
    WARN = "warn"
    BAD = "bad"


@dataclass
class FormFeedback:
    """Form verdict for one frame."""
    quality: FormQuality
    score: float  # 0-100
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quality": self.quality.value,
            "score": round(self.score, 1),
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


class FormCheck:
    """Accumulates rule violations for a single frame."""

    def __init__(self):
        self.score = MAX_SCORE
        self.issues: List[str] = []
        self.suggestions: List[str] = []

    def penalize(self, penalty: float, message: FormMessage):
        self.score -= penalty
        self.issues.append(message.issue)
        self.suggestions.append(message.suggestion)

    @property
    def clamped_score(self) -> float:
        return max(0.0, min(MAX_SCORE, self.score))


def classify_score(score: float) -> FormQuality:
    """Band a 0-100 score."""
    if score < WARN_FORM_MIN_SCORE:
        return FormQuality.BAD
    if score < GOOD_FORM_MIN_SCORE:
        return FormQuality.WARN
    return FormQuality.GOOD


def grade_form(check: FormCheck, state) -> FormFeedback:
    """
    Finalize a FormCheck and update the form counters on an analyzer state.

    Args:
        check: Rule results for the frame
        state: AnalyzerState whose counters and last verdict are updated

    Returns:
        FormFeedback with clamped score and quality band
    """
    score = check.clamped_score
    quality = classify_score(score)

    if quality == FormQuality.BAD:
        state.consecutive_bad_forms += 1
        state.consecutive_warnings = 0
    elif quality == FormQuality.WARN:
        state.consecutive_warnings += 1
        state.consecutive_bad_forms = 0
    else:
        state.consecutive_warnings = 0
        state.consecutive_bad_forms = 0

    state.last_form_quality = quality

    return FormFeedback(
        quality=quality,
        score=score,
        issues=check.issues,
        suggestions=check.suggestions,
    )


def not_visible_feedback(message: FormMessage) -> FormFeedback:
    """Zero-score verdict for frames that fail the visibility gate."""
    return FormFeedback(
        quality=FormQuality.WARN,
        score=0.0,
        issues=[message.issue],
        suggestions=[message.suggestion],
    )
