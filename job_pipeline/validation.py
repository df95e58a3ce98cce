"""Field validators and the aggregate form validator.

Validators return structured results and never raise for bad user input. The
message wording and the order rules are checked in are part of the contract:
the authoring UI shows these strings verbatim, and the first failing rule decides
the message of a bullet item.

Two tiers come out of `validate_job_form`:
- errors block Save/Publish,
- warnings are suggestions the author may ignore.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import AnyUrl, Field, TypeAdapter, ValidationError

from .config import settings
from .exceptions import InvalidDeadlineError
from .heuristics import count_letters, is_gibberish, unique_word_ratio
from .models import JobForm, LanguageRequirement, SalaryRange, StageModel, TechnologyItem, WorkingTime
from .utils import parse_float, parse_int

logger = logging.getLogger(__name__)


class FieldResult(StageModel):
    valid: bool
    error: Optional[str] = None


class ListResult(StageModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class FormValidationResult(StageModel):
    valid: bool
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    warnings: Dict[str, List[str]] = Field(default_factory=dict)


def _list_result(errors: List[str]) -> ListResult:
    return ListResult(valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Bullet lists
# ---------------------------------------------------------------------------

BULLET_MIN_LETTERS = 10
_SYMBOLS_ONLY_RE = re.compile(r"[\d\s\-.,;:!?•]+")


def validate_bullet_item(item: str, min_length: int = 20) -> FieldResult:
    """Check one responsibility/qualification line. The first failing rule wins."""
    trimmed = (item or "").strip()

    if len(trimmed) < min_length:
        return FieldResult(valid=False, error=f"Item must be at least {min_length} characters")

    if count_letters(trimmed) < BULLET_MIN_LETTERS:
        return FieldResult(valid=False, error="Item must contain meaningful text (at least 10 letters)")

    if is_gibberish(trimmed):
        return FieldResult(valid=False, error="Please avoid placeholder or gibberish text")

    # Unreachable after the letter check above; kept so the rule order stays as documented.
    if _SYMBOLS_ONLY_RE.fullmatch(trimmed):
        return FieldResult(valid=False, error="Item cannot be only numbers or symbols")

    return FieldResult(valid=True)


def validate_bullet_list(items: Sequence[str], min_items: int, item_min_length: int = 20) -> ListResult:
    errors: List[str] = []

    if len(items) < min_items:
        errors.append(f"At least {min_items} items are required")

    for index, item in enumerate(items, start=1):
        result = validate_bullet_item(item, item_min_length)
        if not result.valid:
            errors.append(f"Item {index}: {result.error}")

    return _list_result(errors)


# ---------------------------------------------------------------------------
# Technology stack and languages
# ---------------------------------------------------------------------------

PLACEHOLDER_TECH_NAMES = frozenset({"test", "asd", "qwe", "zxc", "123", "abc", "xyz", "temp", "demo"})


def validate_technology_stack(items: Sequence[TechnologyItem]) -> ListResult:
    errors: List[str] = []

    for index, item in enumerate(items, start=1):
        name_lower = item.name.lower().strip()

        if name_lower in PLACEHOLDER_TECH_NAMES:
            errors.append(f'Technology {index}: "{item.name}" appears to be a placeholder')

        if len(name_lower) < 2:
            errors.append(f"Technology {index}: Name too short")

        if is_gibberish(item.name):
            errors.append(f'Technology {index}: "{item.name}" appears to be gibberish')

    return _list_result(errors)


def validate_language_requirements(requirements: Sequence[LanguageRequirement]) -> ListResult:
    errors: List[str] = []

    for index, req in enumerate(requirements, start=1):
        if not req.language.strip():
            errors.append(f"Language {index}: Language is required")

        if not req.language_code.strip():
            errors.append(f"Language {index}: Language code is required")

        if not req.proficiency.strip():
            errors.append(f"Language {index}: Proficiency level is required")

        if req.certificate is not None:
            if not req.certificate.type.strip():
                errors.append(f"Language {index}: Certificate type is required when certificate is specified")
            if not req.certificate.score.strip():
                errors.append(f"Language {index}: Certificate score is required when certificate is specified")

    return _list_result(errors)


# ---------------------------------------------------------------------------
# Salary, deadline, application method
# ---------------------------------------------------------------------------


def validate_salary(salary: SalaryRange) -> ListResult:
    errors: List[str] = []
    low = parse_float(salary.min)
    high = parse_float(salary.max)

    if not salary.negotiable:
        if low <= 0:
            errors.append("Minimum salary must be greater than 0 when not negotiable")
        if high <= 0:
            errors.append("Maximum salary must be greater than 0 when not negotiable")
        if low > 0 and high > 0 and high < low:
            errors.append("Maximum salary must be greater than or equal to minimum salary")

    if (low > 0 or high > 0) and not salary.currency:
        errors.append("Currency is required when salary is specified")

    return _list_result(errors)


def reference_timezone() -> timezone:
    return timezone(timedelta(hours=settings.reference_utc_offset_hours))


def parse_deadline(value: str, tz: Optional[timezone] = None) -> datetime:
    """Parse an ISO date or datetime into an aware datetime.

    Date-only and naive values are wall-clock times in the reference timezone.

    Raises:
        InvalidDeadlineError: the value is not an ISO date/datetime.
    """
    tz = tz or reference_timezone()
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDeadlineError(value) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def validate_application_deadline(deadline: Optional[str], status: str, now: Optional[datetime] = None) -> FieldResult:
    """A PUBLISHED job needs a deadline strictly in the future (reference timezone).

    Raises:
        InvalidDeadlineError: a non-empty deadline could not be parsed.
    """
    if not (deadline or "").strip():
        if status == "PUBLISHED":
            return FieldResult(valid=False, error="Application deadline is required for published jobs")
        return FieldResult(valid=True)

    tz = reference_timezone()
    deadline_at = parse_deadline(deadline, tz)

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    reference_now = now.astimezone(tz)

    if status == "PUBLISHED" and deadline_at <= reference_now:
        return FieldResult(
            valid=False,
            error="Application deadline must be in the future (Asia/Ho_Chi_Minh timezone)",
        )

    return FieldResult(valid=True)


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_URL_ADAPTER = TypeAdapter(AnyUrl)


def is_absolute_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def validate_application_method(method: str, email: Optional[str], link: Optional[str]) -> ListResult:
    errors: List[str] = []
    method = (method or "").lower()
    email = email or ""
    link = link or ""

    if method == "email":
        if not email.strip():
            errors.append("Email is required when application method is email")
        elif not EMAIL_RE.match(email):
            errors.append("Please provide a valid email address")

    if method == "link":
        if not link.strip():
            errors.append("Link is required when application method is external link")
        elif not is_absolute_url(link):
            errors.append("Please provide a valid URL (must start with http:// or https://)")

    return _list_result(errors)


# ---------------------------------------------------------------------------
# Title, company, overview
# ---------------------------------------------------------------------------


def validate_job_title(title: str) -> ListResult:
    """10-120 characters, at least 2 letters, not gibberish. Every failing check is reported."""
    errors: List[str] = []
    if len(title) < 10:
        errors.append("Job title must be at least 10 characters")
    if len(title) > 120:
        errors.append("Job title must not exceed 120 characters")
    if count_letters(title) < 2:
        errors.append("Job title must contain at least 2 letters")
    if is_gibberish(title):
        errors.append("Please provide a valid job title")
    return _list_result(errors)


def validate_company_name(name: str) -> ListResult:
    errors: List[str] = []
    if len(name) < 2:
        errors.append("Company name must be at least 2 characters")
    if len(name) > 120:
        errors.append("Company name must not exceed 120 characters")
    if len(name.strip()) < 2:
        errors.append("Company name is required")
    return _list_result(errors)


OVERVIEW_MIN_LENGTH = 80


def validate_job_overview(overview: str) -> ListResult:
    """At least 80 characters and 20 letters, not gibberish, more than half the words unique."""
    errors: List[str] = []
    if len(overview) < OVERVIEW_MIN_LENGTH:
        errors.append("Job overview must be at least 80 characters for quality matching")
    if count_letters(overview) < 20:
        errors.append("Job overview must contain at least 20 letters")
    if is_gibberish(overview):
        errors.append("Please provide a meaningful job overview, not placeholder text")
    if unique_word_ratio(overview) <= 0.5:
        errors.append("Job overview appears to contain too much repetition")
    return _list_result(errors)


# ---------------------------------------------------------------------------
# Record-level checks used by the services layer
# ---------------------------------------------------------------------------

MAX_EXPERIENCE_YEARS = 30
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
WORKING_DAYS = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")


def validate_experience_years(years: int) -> FieldResult:
    if years < 0:
        return FieldResult(valid=False, error="Experience cannot be negative")
    if years > MAX_EXPERIENCE_YEARS:
        return FieldResult(valid=False, error=f"Experience cannot exceed {MAX_EXPERIENCE_YEARS} years")
    return FieldResult(valid=True)


def validate_iso_date(value: str) -> FieldResult:
    if not value:
        return FieldResult(valid=False, error="Date is required")
    if not _ISO_DATE_RE.match(value):
        return FieldResult(valid=False, error="Date must be in YYYY-MM-DD format")
    try:
        date.fromisoformat(value)
    except ValueError:
        return FieldResult(valid=False, error="Invalid date")
    return FieldResult(valid=True)


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def validate_working_time(working_time: WorkingTime) -> FieldResult:
    if not working_time.days:
        return FieldResult(valid=False, error="At least one working day is required")

    invalid_days = [d for d in working_time.days if d not in WORKING_DAYS]
    if invalid_days:
        return FieldResult(valid=False, error=f"Invalid day codes: {', '.join(invalid_days)}")

    if working_time.start and not _HHMM_RE.match(working_time.start):
        return FieldResult(valid=False, error="Start time must be in HH:MM format (24-hour)")
    if working_time.end and not _HHMM_RE.match(working_time.end):
        return FieldResult(valid=False, error="End time must be in HH:MM format (24-hour)")

    if working_time.start and working_time.end and _minutes(working_time.start) >= _minutes(working_time.end):
        return FieldResult(valid=False, error="Start time must be before end time")

    return FieldResult(valid=True)


# ---------------------------------------------------------------------------
# Whole form
# ---------------------------------------------------------------------------

MIN_RESPONSIBILITIES = 3
MIN_REQUIRED_QUALIFICATIONS = 3


def validate_job_form(form: Union[JobForm, Mapping[str, Any]], now: Optional[datetime] = None) -> FormValidationResult:
    """Run every field validator over a form.

    Accepts a `JobForm` (raw or normalized) or the wizard's JSON mapping. Errors and
    warnings are keyed by the camelCase form field they belong to; `valid` is True
    iff there are no errors.
    """
    if not isinstance(form, JobForm):
        form = JobForm.model_validate(form)

    errors: Dict[str, List[str]] = {}
    warnings: Dict[str, List[str]] = {}

    def collect(field: str, result: ListResult) -> None:
        if not result.valid:
            errors[field] = result.errors

    collect("title", validate_job_title(form.title))
    collect("company", validate_company_name(form.company))
    collect("jobOverview", validate_job_overview(form.job_overview))
    collect(
        "responsibilities",
        validate_bullet_list(form.responsibilities, MIN_RESPONSIBILITIES),
    )
    collect(
        "requiredQualifications",
        validate_bullet_list(form.required_qualifications, MIN_REQUIRED_QUALIFICATIONS),
    )
    if form.preferred_qualifications:
        collect("preferredQualifications", validate_bullet_list(form.preferred_qualifications, 0))

    all_tech = form.technology_stack.all_items()
    if not all_tech:
        warnings["technologyStack"] = ["Consider adding at least one technology for better candidate matching"]
    else:
        collect("technologyStack", validate_technology_stack(all_tech))

    if form.language_requirements:
        collect("languageRequirements", validate_language_requirements(form.language_requirements))

    if form.salary is not None:
        collect("salary", validate_salary(form.salary))

    try:
        deadline = validate_application_deadline(form.application_deadline, form.job_status.upper(), now=now)
    except InvalidDeadlineError as exc:
        errors["applicationDeadline"] = [exc.message]
    else:
        if not deadline.valid:
            errors["applicationDeadline"] = [deadline.error]

    collect(
        "applicationMethod",
        validate_application_method(form.apply_method, form.apply_email, form.apply_link),
    )

    if form.occupation is None:
        errors["occupation"] = ["Job role/occupation is required"]
    if not form.job_level:
        errors["jobLevel"] = ["Job level is required"]
    if not form.work_mode:
        errors["workMode"] = ["Work mode is required"]
    if form.location is None:
        errors["location"] = ["Job location is required"]

    experience = validate_experience_years(parse_int(form.required_experience))
    if not experience.valid:
        errors["requiredExperience"] = [experience.error]
    if parse_int(form.number_of_hires, default=1) < 1:
        errors["numberOfHires"] = ["Number of hires must be at least 1"]

    if errors:
        logger.debug("Job form blocked by %d field(s): %s", len(errors), ", ".join(errors))

    return FormValidationResult(valid=not errors, errors=errors, warnings=warnings)
