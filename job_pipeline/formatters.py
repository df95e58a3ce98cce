"""Display labels for job records.

Each enum has exactly one label per member; the label tables are checked
against their `Literal` type on import, so adding a member without a label
fails loudly instead of leaking the raw value into the UI.
"""

from __future__ import annotations

from typing import Any, Dict, get_args

from .models import (
    ApplyMethod,
    EducationLevel,
    EmploymentType,
    JobLevel,
    JobStatus,
    LanguageProficiency,
    LegacyJobRecord,
    LocationDetails,
    WorkMode,
)


def _labels(literal: Any, labels: Dict[str, str]) -> Dict[str, str]:
    members = set(get_args(literal))
    if members != set(labels):
        raise RuntimeError(f"Label table out of sync: {sorted(members ^ set(labels))}")
    return labels


JOB_LEVEL_LABELS = _labels(
    JobLevel,
    {
        "INTERN": "Intern",
        "JUNIOR": "Junior",
        "MID": "Mid-Level",
        "SENIOR": "Senior",
        "LEAD": "Lead",
        "MANAGER": "Manager",
    },
)

EMPLOYMENT_TYPE_LABELS = _labels(
    EmploymentType,
    {
        "FULL_TIME": "Full-time",
        "PART_TIME": "Part-time",
        "CONTRACT": "Contract",
        "TEMP": "Temporary",
        "FREELANCE": "Freelance",
    },
)

EDUCATION_LEVEL_LABELS = _labels(
    EducationLevel,
    {
        "HIGH_SCHOOL": "High School",
        "ASSOCIATE": "Associate Degree",
        "BACHELOR": "Bachelor's Degree",
        "MASTER": "Master's Degree",
        "PHD": "PhD",
        "NONE": "Not Required",
    },
)

WORK_MODE_LABELS = _labels(WorkMode, {"ONSITE": "Onsite", "REMOTE": "Remote", "HYBRID": "Hybrid"})

STATUS_LABELS = _labels(JobStatus, {"DRAFT": "Draft", "PUBLISHED": "Published"})

LANGUAGE_PROFICIENCY_LABELS = _labels(
    LanguageProficiency,
    {"BASIC": "Basic", "INTERMEDIATE": "Intermediate", "FLUENT": "Fluent", "NATIVE": "Native"},
)

APPLY_METHOD_LABELS = _labels(
    ApplyMethod,
    {"PLATFORM": "Apply on platform", "EMAIL": "Apply by email", "LINK": "External link"},
)


def format_job_level(level: JobLevel) -> str:
    return JOB_LEVEL_LABELS[level]


def format_employment_type(employment_type: EmploymentType) -> str:
    return EMPLOYMENT_TYPE_LABELS[employment_type]


def format_education_level(level: EducationLevel) -> str:
    return EDUCATION_LEVEL_LABELS[level]


def format_work_mode(mode: WorkMode) -> str:
    return WORK_MODE_LABELS[mode]


def format_status(status: JobStatus) -> str:
    return STATUS_LABELS[status]


def format_language_proficiency(proficiency: LanguageProficiency) -> str:
    return LANGUAGE_PROFICIENCY_LABELS[proficiency]


def format_apply_method(method: ApplyMethod) -> str:
    return APPLY_METHOD_LABELS[method]


def format_experience(years: int) -> str:
    """0 -> "No experience required", 7 and up -> "7+ years"."""
    if years == 0:
        return "No experience required"
    if years >= 7:
        return f"{years}+ years"
    return f"{years} years"


def format_location(location: LocationDetails) -> str:
    if not location.city and not location.country:
        return "Remote"
    if not location.country:
        return location.city
    if not location.city:
        return location.country
    return f"{location.city}, {location.country}"


def describe_job(job: LegacyJobRecord) -> str:
    """One line for listings, e.g. "Backend Developer · Senior · Full-time · Hybrid · Hanoi, Vietnam"."""
    parts = [
        job.title,
        format_job_level(job.job_level),
        format_employment_type(job.employment_type),
        format_work_mode(job.work_mode),
        format_location(job.location_details),
    ]
    return " · ".join(p for p in parts if p)
