"""Normalization of authored job forms.

Deterministic, order-preserving clean-up applied before validation:
- list items lose their bullet / numbering markers and are de-duplicated
- technology items are trimmed and de-duplicated by name
- enum-like strings are upper-cased and mapped into their closed sets
- salary amounts typed as strings become integers

Every transform is idempotent: normalizing a normalized form changes nothing.
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union, get_args

from .models import (
    EducationLevel,
    EmploymentType,
    FormApplyMethod,
    JobForm,
    JobLevel,
    JobStatus,
    LanguageRequirement,
    NormalizedJobForm,
    SalaryRange,
    TechnologyItem,
    TechnologyStack,
    WorkMode,
)
from .utils import parse_int, uniq_preserve_order

logger = logging.getLogger(__name__)

# "1. ", "12) " (the space is required so "1.5 years" survives), then "- ", "• ", "* ".
NUMBERED_PREFIX_RE = re.compile(r"^\d+[.)]\s+")
BULLET_PREFIX_RE = re.compile(r"^[-•*]\s*")

_ENUM_SEPARATOR_RE = re.compile(r"[\s\-]+")

T = TypeVar("T", bound=TechnologyItem)


def strip_list_prefixes(text: str) -> str:
    """Remove leading list markers, e.g. "1. Design APIs" -> "Design APIs"."""
    current = text.strip()
    while True:
        stripped = BULLET_PREFIX_RE.sub("", NUMBERED_PREFIX_RE.sub("", current)).strip()
        if stripped == current:
            return current
        current = stripped


def normalize_string_array(items: Sequence[str]) -> List[str]:
    """Strip markers, drop empties, de-duplicate case-insensitively (first casing wins)."""
    return uniq_preserve_order(strip_list_prefixes(item) for item in items)


def deduplicate_case_insensitive(items: Sequence[T]) -> List[T]:
    seen = set()
    out: List[T] = []
    for item in items:
        key = item.name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


def normalize_technology_stack(items: Sequence[T]) -> List[T]:
    """Trim names, drop blank rows, then de-duplicate by name."""
    trimmed = [item.model_copy(update={"name": item.name.strip()}) for item in items]
    return deduplicate_case_insensitive([item for item in trimmed if item.name])


def normalize_enum(value: Optional[str]) -> Optional[str]:
    return value.upper() if value else None


def canonical_enum(value: Optional[str], allowed: Tuple[str, ...], field: str) -> Optional[str]:
    """Map a free enum spelling ("full-time", "Full Time") into `allowed`, else None."""
    upper = normalize_enum(value.strip() if value else value)
    if upper is None:
        return None
    candidate = _ENUM_SEPARATOR_RE.sub("_", upper)
    if candidate in allowed:
        return candidate
    logger.warning("Dropping unknown %s value %r", field, value)
    return None


def normalize_salary(salary: Optional[SalaryRange]) -> Optional[SalaryRange]:
    """Coerce string amounts to integers; a failed parse becomes 0."""
    if salary is None:
        return None
    update = {}
    if isinstance(salary.min, str):
        update["min"] = parse_int(salary.min)
    if isinstance(salary.max, str):
        update["max"] = parse_int(salary.max)
    return salary.model_copy(update=update) if update else salary


def normalize_language_requirement(req: LanguageRequirement) -> LanguageRequirement:
    update: dict = {
        "language": req.language.strip(),
        "language_code": req.language_code.strip(),
        "proficiency": req.proficiency.strip(),
    }
    if req.certificate is not None:
        update["certificate"] = req.certificate.model_copy(
            update={"type": req.certificate.type.strip(), "score": req.certificate.score.strip()}
        )
    return req.model_copy(update=update)


def _normalize_stack(stack: TechnologyStack) -> TechnologyStack:
    return TechnologyStack(
        programming_languages=normalize_technology_stack(stack.programming_languages),
        frameworks=normalize_technology_stack(stack.frameworks),
        databases=normalize_technology_stack(stack.databases),
        tools_platforms=normalize_technology_stack(stack.tools_platforms),
    )


def _apply_method(value: str) -> str:
    method = (value or "").strip().lower()
    allowed = get_args(FormApplyMethod)
    if method in allowed:
        return method
    logger.warning("Unknown apply method %r, using 'platform'", value)
    return "platform"


def _job_status(value: str) -> str:
    status = (value or "").strip().upper()
    if status in get_args(JobStatus):
        return status
    logger.warning("Unknown job status %r, using 'DRAFT'", value)
    return "DRAFT"


def normalize_job_form(form: Union[JobForm, Mapping[str, Any]]) -> NormalizedJobForm:
    """Compose every normalizer over a raw form. Pure: the input is left untouched."""
    if not isinstance(form, JobForm):
        form = JobForm.model_validate(form)

    data = dict(form)
    data.update(
        title=form.title.strip(),
        company=form.company.strip(),
        job_overview=form.job_overview.strip(),
        working_time=form.working_time.strip(),
        apply_email=form.apply_email.strip(),
        apply_link=form.apply_link.strip(),
        application_deadline=form.application_deadline.strip(),
        job_level=canonical_enum(form.job_level, get_args(JobLevel), "jobLevel"),
        employment_type=canonical_enum(form.employment_type, get_args(EmploymentType), "employmentType"),
        work_mode=canonical_enum(form.work_mode, get_args(WorkMode), "workMode"),
        education_level=canonical_enum(form.education_level, get_args(EducationLevel), "educationLevel"),
        responsibilities=normalize_string_array(form.responsibilities),
        required_qualifications=normalize_string_array(form.required_qualifications),
        preferred_qualifications=normalize_string_array(form.preferred_qualifications),
        custom_benefits=normalize_string_array(form.custom_benefits),
        benefits=uniq_preserve_order(b.strip() for b in form.benefits),
        technology_stack=_normalize_stack(form.technology_stack),
        salary=normalize_salary(form.salary),
        language_requirements=[normalize_language_requirement(r) for r in form.language_requirements],
        required_experience=parse_int(form.required_experience),
        number_of_hires=parse_int(form.number_of_hires, default=1),
        apply_method=_apply_method(form.apply_method),
        job_status=_job_status(form.job_status),
    )
    return NormalizedJobForm.model_validate(data)
