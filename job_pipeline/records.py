"""Persisted job records.

Two ways in:
- `build_legacy_record` turns a validated form into the record the store owns.
- `normalize_job` reads whatever the store (or an old export) hands back and
  maps it onto the same schema. It never raises: unknown spellings fall back to
  documented defaults so bulk migration can run over historical data.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .models import (
    ApplicationMethod,
    Benefits,
    Industry,
    LegacyJobRecord,
    LocationDetails,
    Occupation,
    PredefinedBenefit,
    Requirements,
    SalaryRange,
    ValidatedJobForm,
    WorkingTime,
)
from .taxonomy.base import TaxonomyCandidate
from .taxonomy.esco import ESCO_TAXONOMY
from .taxonomy.vsic import DEFAULT_VSIC_VERSION, VSIC_TAXONOMY
from .utils import parse_float, parse_int, stable_id
from .validation import validate_iso_date, validate_working_time

logger = logging.getLogger(__name__)


PREDEFINED_BENEFITS: Dict[str, PredefinedBenefit] = {
    b.id: b
    for b in (
        PredefinedBenefit(id="health_insurance", label="Health Insurance", icon="🏥"),
        PredefinedBenefit(id="13th_month", label="13th Month Salary", icon="💰"),
        PredefinedBenefit(id="performance_bonus", label="Performance Bonus", icon="🎯"),
        PredefinedBenefit(id="laptop_provided", label="Laptop Provided", icon="💻"),
        PredefinedBenefit(id="team_building", label="Team Building", icon="🎉"),
        PredefinedBenefit(id="annual_leave", label="Annual Leave", icon="🏖️"),
        PredefinedBenefit(id="training_budget", label="Training Budget", icon="📚"),
        PredefinedBenefit(id="flexible_hours", label="Flexible Working Hours", icon="⏰"),
        PredefinedBenefit(id="remote_work", label="Remote Work Option", icon="🏠"),
        PredefinedBenefit(id="parking", label="Free Parking", icon="🚗"),
        PredefinedBenefit(id="lunch", label="Free Lunch", icon="🍱"),
        PredefinedBenefit(id="gym", label="Gym Membership", icon="💪"),
        PredefinedBenefit(id="insurance_family", label="Family Insurance", icon="👨‍👩‍👧‍👦"),
        PredefinedBenefit(id="stock_options", label="Stock Options", icon="📈"),
        PredefinedBenefit(id="relocation", label="Relocation Support", icon="🚚"),
        PredefinedBenefit(id="childcare", label="Childcare Support", icon="👶"),
    )
}

DEFAULT_WORKING_DAYS = ["MON", "TUE", "WED", "THU", "FRI"]
DEFAULT_WORKING_HOURS = ("09:00", "18:00")
DEFAULT_WORKING_TIMEZONE = "Asia/Ho_Chi_Minh"


def resolve_benefit(benefit_id: str) -> PredefinedBenefit:
    """Look up a predefined benefit; unknown ids keep an empty label and icon."""
    return PREDEFINED_BENEFITS.get(benefit_id) or PredefinedBenefit(id=benefit_id)


def working_time_from_text(text: str) -> Optional[WorkingTime]:
    """Wrap free-text hours into the default office schedule, keeping the text as a note."""
    text = (text or "").strip()
    if not text:
        return None
    start, end = DEFAULT_WORKING_HOURS
    return WorkingTime(
        days=list(DEFAULT_WORKING_DAYS),
        start=start,
        end=end,
        timezone=DEFAULT_WORKING_TIMEZONE,
        note=text,
    )


def _iso_now(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


# ---------------------------------------------------------------------------
# Taxonomy selections
# ---------------------------------------------------------------------------


def occupation_from_candidate(candidate: TaxonomyCandidate) -> Occupation:
    return Occupation(taxonomy=ESCO_TAXONOMY, code=candidate.code, label=candidate.label)


def industry_from_candidate(candidate: TaxonomyCandidate) -> Industry:
    return Industry(
        taxonomy=VSIC_TAXONOMY,
        version=candidate.version or DEFAULT_VSIC_VERSION,
        code=candidate.code,
        label=candidate.label,
    )


def location_from_candidate(candidate: TaxonomyCandidate) -> LocationDetails:
    return LocationDetails(city=candidate.label, country=candidate.country or "", code=candidate.code)


# ---------------------------------------------------------------------------
# Submit payload
# ---------------------------------------------------------------------------


def build_legacy_record(
    validated: ValidatedJobForm,
    record_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LegacyJobRecord:
    """Map a validated form onto the persisted record schema.

    Args:
        validated: Output of the publish gate.
        record_id: Id to use; defaults to a hash of company, title and creation time.
        now: Creation time (UTC now by default).
    """
    form = validated.form
    created_at = _iso_now(now)

    salary = form.salary
    if salary is not None and not (parse_float(salary.min) or parse_float(salary.max)):
        salary = None

    occupation = None
    if form.occupation is not None:
        occupation = form.occupation.model_copy(update={"taxonomy": ESCO_TAXONOMY})

    data: Dict[str, Any] = {
        "id": record_id or stable_id("job", form.company, form.title, created_at),
        "title": form.title,
        "company_name": form.company,
        "job_level": form.job_level,
        "employment_type": form.employment_type,
        "education_level": form.education_level,
        "work_mode": form.work_mode,
        "min_years_experience": form.required_experience,
        "language_requirements": form.language_requirements,
        "location_details": form.location or LocationDetails(),
        "job_overview": form.job_overview,
        "responsibilities": form.responsibilities,
        "requirements": Requirements(
            required=form.required_qualifications,
            preferred=form.preferred_qualifications,
        ),
        "technology_stack": form.technology_stack,
        "benefits": Benefits(
            predefined=[resolve_benefit(b) for b in form.benefits],
            custom=form.custom_benefits,
        ),
        "salary": salary,
        "working_time": working_time_from_text(form.working_time),
        "application_deadline": form.application_deadline,
        "number_of_hires": max(form.number_of_hires, 1),
        "apply": ApplicationMethod(
            method=form.apply_method.upper(),
            email=form.apply_email or None,
            link=form.apply_link or None,
        ),
        "occupation": occupation,
        "industries": [ind.model_copy(update={"taxonomy": VSIC_TAXONOMY}) for ind in form.industries],
        "status": form.job_status,
        "metadata": {"created_at": created_at, "updated_at": created_at},
    }
    return LegacyJobRecord.model_validate(data)


# ---------------------------------------------------------------------------
# Lenient reader
# ---------------------------------------------------------------------------


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [line.strip() for line in value.split("\n") if line.strip()]
    if isinstance(value, list):
        return [_text(v) for v in value if _text(v)]
    return []


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _job_level(value: Any) -> str:
    v = _text(value).upper().strip()
    if "INTERN" in v:
        return "INTERN"
    if "JUNIOR" in v:
        return "JUNIOR"
    if "MID" in v:
        return "MID"
    if "SENIOR" in v:
        return "SENIOR"
    if "LEAD" in v:
        return "LEAD"
    if "MANAGER" in v or "DIRECTOR" in v or "C-LEVEL" in v:
        return "MANAGER"
    return "JUNIOR"


def _employment_type(value: Any) -> str:
    v = re.sub(r"[-_\s]", "_", _text(value).upper().strip())
    if "FULL" in v:
        return "FULL_TIME"
    if "PART" in v:
        return "PART_TIME"
    if "CONTRACT" in v:
        return "CONTRACT"
    if "TEMP" in v:
        return "TEMP"
    if "FREELANCE" in v:
        return "FREELANCE"
    return "FULL_TIME"


def _education_level(value: Any) -> str:
    v = re.sub(r"[-_\s]", "_", _text(value).upper().strip())
    if "HIGH" in v or "SCHOOL" in v:
        return "HIGH_SCHOOL"
    if "ASSOCIATE" in v:
        return "ASSOCIATE"
    if "BACHELOR" in v:
        return "BACHELOR"
    if "MASTER" in v:
        return "MASTER"
    if "PHD" in v or "DOCTOR" in v:
        return "PHD"
    return "NONE"


def _work_mode(value: Any) -> str:
    v = _text(value).upper().strip()
    if "REMOTE" in v:
        return "REMOTE"
    if "HYBRID" in v:
        return "HYBRID"
    return "ONSITE"


def _status(value: Any) -> str:
    v = _text(value).upper().strip()
    return "PUBLISHED" if v in ("PUBLISHED", "OPEN") else "DRAFT"


def _apply_method(value: Any) -> str:
    v = _text(value).upper().strip()
    return v if v in ("PLATFORM", "EMAIL", "LINK") else "PLATFORM"


def _experience(value: Any) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return max(int(parse_float(value)), 0)
    match = re.search(r"\d+", _text(value))
    return int(match.group(0)) if match else 0


def _location(raw: Mapping[str, Any]) -> Dict[str, Any]:
    details = raw.get("locationDetails")
    if isinstance(details, dict):
        return {
            "city": _text(details.get("city")),
            "country": _text(details.get("country")),
            "code": _text(details.get("code")) or None,
        }
    location = raw.get("location")
    if isinstance(location, str):
        parts = [p.strip() for p in location.split(",")]
        return {"city": parts[0] if parts else "", "country": parts[1] if len(parts) > 1 else ""}
    return {}


LANGUAGE_CODES = {
    "english": "en",
    "vietnamese": "vi",
    "japanese": "ja",
    "korean": "ko",
    "chinese": "zh",
    "french": "fr",
    "german": "de",
    "spanish": "es",
}

_LANGUAGE_LEVEL_RE = re.compile(r"^(.+?)\s*[-–]\s*(.+)$")


def _proficiency_from_text(text: str) -> str:
    t = text.lower()
    if "native" in t:
        return "NATIVE"
    if "fluent" in t:
        return "FLUENT"
    if "basic" in t:
        return "BASIC"
    return "INTERMEDIATE"


def _language_requirements(raw: Mapping[str, Any]) -> List[Dict[str, Any]]:
    reqs = raw.get("languageRequirements")
    if isinstance(reqs, list):
        out = []
        for req in reqs:
            if not isinstance(req, dict):
                continue
            language = _text(req.get("language"))
            certificate = req.get("certificate")
            item: Dict[str, Any] = {
                "language": language,
                "language_code": _text(req.get("languageCode")) or language.lower()[:2] or "en",
                "proficiency": _text(req.get("proficiency")) or "INTERMEDIATE",
                "certificate": certificate if isinstance(certificate, dict) else None,
            }
            if isinstance(req.get("required"), bool):
                item["required"] = req["required"]
            out.append(item)
        return out

    # Older exports: "English - Fluent, Japanese - Basic"
    text = raw.get("languageRequirement")
    if not isinstance(text, str):
        return []
    out = []
    for part in text.split(","):
        match = _LANGUAGE_LEVEL_RE.match(part.strip())
        if not match:
            continue
        language = match.group(1).strip()
        out.append(
            {
                "language": language,
                "language_code": LANGUAGE_CODES.get(language.lower(), "en"),
                "proficiency": _proficiency_from_text(match.group(2)),
            }
        )
    return out


def _tech_items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, str):
            out.append({"name": item})
        elif isinstance(item, dict):
            out.append({**item, "name": _text(item.get("name"))})
    return out


def _technology_stack(raw: Mapping[str, Any]) -> Dict[str, Any]:
    stack = _dict(raw.get("technologyStack"))
    return {
        "programming_languages": _tech_items(stack.get("programmingLanguages")),
        "frameworks": _tech_items(stack.get("frameworks")),
        "databases": _tech_items(stack.get("databases")),
        "tools_platforms": _tech_items(stack.get("toolsPlatforms")),
    }


def _requirements(raw: Mapping[str, Any]) -> Dict[str, Any]:
    reqs = raw.get("requirements")
    if isinstance(reqs, dict):
        return {"required": _text_list(reqs.get("required")), "preferred": _text_list(reqs.get("preferred"))}
    if isinstance(reqs, str):
        return {"required": _text_list(reqs), "preferred": []}
    return {}


def _benefits(raw: Mapping[str, Any]) -> Dict[str, Any]:
    benefits = raw.get("benefits")
    if not isinstance(benefits, dict):
        return {}
    predefined = []
    items = benefits.get("predefined")
    for b in items if isinstance(items, list) else []:
        if isinstance(b, str):
            predefined.append(resolve_benefit(b))
        elif isinstance(b, dict) and _text(b.get("id")):
            predefined.append(
                PredefinedBenefit(id=_text(b.get("id")), label=_text(b.get("label")), icon=_text(b.get("icon")))
            )
    return {"predefined": predefined, "custom": _text_list(benefits.get("custom"))}


def _salary(raw: Mapping[str, Any]) -> Optional[SalaryRange]:
    salary = raw.get("salary")
    if not isinstance(salary, dict):
        return None
    low = parse_float(salary.get("min"))
    high = parse_float(salary.get("max"))
    if low <= 0 and high <= 0:
        return None
    negotiable = salary.get("negotiable")
    if negotiable is None:
        negotiable = salary.get("isNegotiable")
    pay_type = _text(salary.get("type")) or ("NET" if salary.get("isGross") is False else "GROSS")
    return SalaryRange(
        min=int(low) if low.is_integer() else low,
        max=int(high) if high.is_integer() else high,
        currency=_text(salary.get("currency")) or "USD",
        negotiable=bool(negotiable),
        type=pay_type,
    )


def _working_time(raw: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    value = raw.get("workingTime")
    if isinstance(value, dict) and value.get("days"):
        wt = WorkingTime(
            days=[d.strip().upper() for d in _text_list(value.get("days"))],
            start=_text(value.get("start")),
            end=_text(value.get("end")),
            timezone=_text(value.get("timezone")),
            note=value.get("note") if isinstance(value.get("note"), str) else None,
        )
        checked = validate_working_time(wt)
        if not checked.valid:
            logger.warning("Dropping working time of record %s: %s", raw.get("id"), checked.error)
            return None
        return wt.model_dump()
    if isinstance(value, str):
        wt = working_time_from_text(value)
        return wt.model_dump() if wt else None
    return None


def _deadline(raw: Mapping[str, Any]) -> str:
    value = _text(raw.get("applicationDeadline")).strip()
    if not value:
        return ""
    checked = validate_iso_date(value[:10])
    if not checked.valid:
        logger.warning("Dropping deadline %r of record %s: %s", value, raw.get("id"), checked.error)
        return ""
    return value


def _apply(raw: Mapping[str, Any]) -> Dict[str, Any]:
    apply = _dict(raw.get("apply"))
    return {
        "method": _apply_method(apply.get("method") or raw.get("applyMethod")),
        "email": _text(apply.get("email") or raw.get("applyEmail")) or None,
        "link": _text(apply.get("link") or raw.get("applyLink")) or None,
    }


def _occupation(raw: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    occ = raw.get("occupation")
    if not isinstance(occ, dict):
        return None
    return {"taxonomy": _text(occ.get("taxonomy")) or None, "code": _text(occ.get("code")), "label": _text(occ.get("label"))}


def _industries(raw: Mapping[str, Any]) -> List[Dict[str, Any]]:
    items = raw.get("industries")
    if not isinstance(items, list):
        return []
    return [
        {
            "taxonomy": _text(ind.get("taxonomy")) or None,
            "version": _text(ind.get("version")),
            "code": _text(ind.get("code")),
            "label": _text(ind.get("label")),
        }
        for ind in items
        if isinstance(ind, dict)
    ]


def _metadata(raw: Mapping[str, Any], now: Optional[datetime]) -> Dict[str, str]:
    meta = _dict(raw.get("metadata"))
    fallback = _iso_now(now)
    return {
        "created_at": _text(meta.get("createdAt") or raw.get("createdAt")) or fallback,
        "updated_at": _text(meta.get("updatedAt") or raw.get("updatedAt")) or fallback,
    }


def legacy_record_fields(raw: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Read a raw record dict into `LegacyJobRecord` field values (snake_case keys)."""
    raw = raw if isinstance(raw, Mapping) else {}
    title = _text(raw.get("title"))
    company = _text(raw.get("companyName") or raw.get("company"))
    record_id = raw.get("id")
    if not isinstance(record_id, (str, int)) or isinstance(record_id, bool) or record_id == "":
        record_id = stable_id("job", company, title)

    hires = parse_int(raw.get("numberOfHires"), default=1)

    return {
        "id": record_id,
        "title": title,
        "company_name": company,
        "job_level": _job_level(raw.get("jobLevel") or raw.get("level")),
        "employment_type": _employment_type(raw.get("employmentType") or raw.get("jobType") or raw.get("type")),
        "education_level": _education_level(raw.get("educationLevel")),
        "work_mode": _work_mode(raw.get("workMode")),
        "min_years_experience": _experience(raw.get("minYearsExperience") or raw.get("requiredExperience")),
        "language_requirements": _language_requirements(raw),
        "location_details": _location(raw),
        "job_overview": _text(raw.get("jobOverview") or raw.get("description")),
        "responsibilities": _text_list(raw.get("responsibilities")) if isinstance(raw.get("responsibilities"), list) else [],
        "requirements": _requirements(raw),
        "technology_stack": _technology_stack(raw),
        "benefits": _benefits(raw),
        "salary": _salary(raw),
        "working_time": _working_time(raw),
        "application_deadline": _deadline(raw),
        "number_of_hires": hires if hires >= 1 else 1,
        "apply": _apply(raw),
        "occupation": _occupation(raw),
        "industries": _industries(raw),
        "status": _status(raw.get("status") or raw.get("jobStatus")),
        "metadata": _metadata(raw, now),
    }


def normalize_job(raw: Any, now: Optional[datetime] = None) -> LegacyJobRecord:
    """Read a stored or exported record into a `LegacyJobRecord`. Never raises."""
    fields = legacy_record_fields(raw, now)
    try:
        return LegacyJobRecord.model_validate(fields)
    except ValidationError as exc:
        # Only nested free-form objects (certificates, tech items) can still be off.
        logger.warning("Record %s has malformed nested fields, keeping the core: %s", fields["id"], exc)
        for key in ("language_requirements", "technology_stack", "working_time"):
            fields.pop(key, None)
        return LegacyJobRecord.model_validate(fields)
