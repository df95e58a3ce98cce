"""Advisory quality score for a job posting.

The score never rejects a form and is computed independently of
`validation.validate_job_form`: a form can be blocked by a missing occupation
and still score well, or score poorly and still be valid.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Union

from pydantic import Field

from .heuristics import word_tokens
from .models import JobForm, StageModel
from .utils import parse_float, round_half_up

_WHITESPACE_RE = re.compile(r"\s+")

OVERVIEW_MIN_LENGTH = 80

BANNER_LOW = "⚠️ Job posting quality is low. Please complete all required sections."
BANNER_ACCEPTABLE = "📝 Job posting is acceptable but could be improved for better candidate matching."
BANNER_GOOD = "✅ Good job posting! Consider the suggestions below to make it excellent."
BANNER_EXCELLENT = "🌟 Excellent job posting! This will attract high-quality candidates."


class CategoryScore(StageModel):
    category: str
    score: float = 0
    max_score: int
    suggestions: List[str] = Field(default_factory=list)


class QualityScoreResult(StageModel):
    total_score: int
    breakdown: List[CategoryScore] = Field(default_factory=list)
    overall_suggestions: List[str] = Field(default_factory=list)


def calculate_text_richness(text: str, min_length: int) -> float:
    """Blend length, word count and vocabulary diversity into a 0-100 score.

    Length contributes up to 40, word count up to 30, diversity up to 30.
    """
    if not text:
        return 0

    length = len(text.strip())
    words = len(_WHITESPACE_RE.split(text.strip()))
    unique_words = len(set(word_tokens(text)))

    score = 0.0

    if length >= min_length * 2:
        score += 40
    elif length >= min_length * 1.5:
        score += 30
    elif length >= min_length:
        score += 20
    else:
        score += (length / min_length) * 20

    if words >= 50:
        score += 30
    elif words >= 30:
        score += 20
    elif words >= 15:
        score += 10
    else:
        score += (words / 15) * 10

    diversity = unique_words / words if words > 0 else 0
    if diversity >= 0.7:
        score += 30
    elif diversity >= 0.5:
        score += 20
    else:
        score += diversity * 30

    return min(score, 100)


def _basic_information(form: JobForm) -> CategoryScore:
    score = 0
    suggestions: List[str] = []

    if len(form.title) >= 10:
        score += 3
    else:
        suggestions.append("Add a descriptive job title (10+ characters)")

    if len(form.company) >= 2:
        score += 2
    else:
        suggestions.append("Add company name")

    if form.occupation is not None:
        score += 3
    else:
        suggestions.append("Select job occupation")

    if form.job_level:
        score += 2
    else:
        suggestions.append("Select job level")

    if form.work_mode:
        score += 2
    else:
        suggestions.append("Select work mode")

    if form.location is not None:
        score += 3
    else:
        suggestions.append("Add job location")

    return CategoryScore(category="Basic Information", score=score, max_score=15, suggestions=suggestions)


def _job_overview(form: JobForm) -> CategoryScore:
    score = 0.0
    suggestions: List[str] = []
    overview = form.job_overview

    if overview:
        score = calculate_text_richness(overview, OVERVIEW_MIN_LENGTH) / 100 * 20
        if len(overview) < OVERVIEW_MIN_LENGTH:
            suggestions.append("Job overview is too short (minimum 80 characters recommended)")
        elif len(overview) < 150:
            suggestions.append("Consider expanding job overview to 150+ characters for better context")
    else:
        suggestions.append("Add a comprehensive job overview")

    return CategoryScore(category="Job Overview", score=score, max_score=20, suggestions=suggestions)


def _responsibilities(form: JobForm) -> CategoryScore:
    count = len(form.responsibilities)
    suggestions: List[str] = []

    if count >= 5:
        score = 15
    elif count >= 3:
        score = 10
    elif count >= 1:
        score = 5
    else:
        score = 0
        suggestions.append("Add at least 3 responsibilities")

    if 0 < count < 3:
        suggestions.append(f"Add {3 - count} more responsibilities")
    elif 3 <= count < 5:
        suggestions.append("Consider adding more responsibilities for clarity (5+ recommended)")

    return CategoryScore(category="Responsibilities", score=score, max_score=15, suggestions=suggestions)


def _requirements(form: JobForm) -> CategoryScore:
    required = len(form.required_qualifications)
    preferred = len(form.preferred_qualifications)
    score = 0
    suggestions: List[str] = []

    if required >= 5:
        score += 10
    elif required >= 3:
        score += 7
    elif required >= 1:
        score += 3
    else:
        suggestions.append("Add at least 3 required qualifications")

    if preferred >= 3:
        score += 5
    elif preferred >= 1:
        score += 2
    else:
        suggestions.append("Add preferred qualifications to attract better candidates")

    if 0 < required < 3:
        suggestions.append(f"Add {3 - required} more required qualifications")

    return CategoryScore(category="Requirements", score=score, max_score=15, suggestions=suggestions)


def _technology_stack(form: JobForm) -> CategoryScore:
    stack = form.technology_stack
    languages = len(stack.programming_languages)
    frameworks = len(stack.frameworks)
    total = len(stack.all_items())
    suggestions: List[str] = []

    if total >= 8:
        score = 15
    elif total >= 5:
        score = 12
    elif total >= 3:
        score = 8
    elif total >= 1:
        score = 4
    else:
        score = 0
        suggestions.append("Add technology stack for better AI matching")

    if languages == 0:
        suggestions.append("Add programming languages")
    if frameworks == 0 and total < 5:
        suggestions.append("Add frameworks/libraries")

    return CategoryScore(category="Technology Stack", score=score, max_score=15, suggestions=suggestions)


def _language_requirements(form: JobForm) -> CategoryScore:
    count = len(form.language_requirements)
    with_certificates = sum(1 for req in form.language_requirements if req.certificate is not None)
    suggestions: List[str] = []

    if count >= 2:
        score = 10
    elif count >= 1:
        score = 7
    else:
        score = 0
        suggestions.append("Add language requirements")

    if count > 0 and with_certificates == 0:
        suggestions.append("Consider adding language certificates for verification")

    return CategoryScore(category="Language Requirements", score=score, max_score=10, suggestions=suggestions)


def _compensation(form: JobForm) -> CategoryScore:
    score = 0
    suggestions: List[str] = []
    salary = form.salary

    if salary is not None and (parse_float(salary.min) > 0 or parse_float(salary.max) > 0 or salary.negotiable):
        score += 5
    else:
        suggestions.append("Add salary information to attract candidates")

    benefits = len(form.benefits) + len(form.custom_benefits)
    if benefits >= 5:
        score += 5
    elif benefits >= 3:
        score += 3
    elif benefits >= 1:
        score += 1
    else:
        suggestions.append("Add benefits to make the position more attractive")

    return CategoryScore(category="Compensation & Benefits", score=score, max_score=10, suggestions=suggestions)


CATEGORY_SCORERS = (
    _basic_information,
    _job_overview,
    _responsibilities,
    _requirements,
    _technology_stack,
    _language_requirements,
    _compensation,
)


def banner_for(total_score: int) -> str:
    if total_score < 50:
        return BANNER_LOW
    if total_score < 70:
        return BANNER_ACCEPTABLE
    if total_score < 85:
        return BANNER_GOOD
    return BANNER_EXCELLENT


def calculate_quality_score(form: Union[JobForm, Mapping[str, Any]]) -> QualityScoreResult:
    """Score a form out of 100 across seven capped categories."""
    if not isinstance(form, JobForm):
        form = JobForm.model_validate(form)

    breakdown = [scorer(form) for scorer in CATEGORY_SCORERS]
    earned = sum(c.score for c in breakdown)
    possible = sum(c.max_score for c in breakdown)
    total = round_half_up(earned / possible * 100)

    return QualityScoreResult(total_score=total, breakdown=breakdown, overall_suggestions=[banner_for(total)])
