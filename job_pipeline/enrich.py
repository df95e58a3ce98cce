"""Migration of legacy records to the AI-enhanced schema, and enrichment.

Everything here is a pure function from one record to a new one. Migration only
fills fields that are absent, so it is idempotent and safe to re-run over data
that was already migrated.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from .models import (
    AIEnhancedJobRecord,
    EnhancedLanguageRequirement,
    ExperienceRange,
    ExtractedSkills,
    ExtractionMetadata,
    LegacyJobRecord,
    ScoringWeights,
)
from .records import legacy_record_fields, normalize_job
from .utils import uniq_preserve_order
from .validation import ListResult

logger = logging.getLogger(__name__)

DEFAULT_EXTRACTED_SKILLS = ExtractedSkills()
DEFAULT_SCORING_WEIGHTS = ScoringWeights()
DEFAULT_EXPERIENCE_RANGE = ExperienceRange()

RULE_EXTRACTOR_VERSION = "rule-v1.0"

SENIORITY_KEYWORDS = (
    "intern",
    "junior",
    "mid",
    "senior",
    "lead",
    "principal",
    "manager",
    "director",
    "head",
    "chief",
    "vp",
    "c-level",
    "entry",
    "experienced",
    "expert",
    "architect",
)

_SENIORITY_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in sorted(SENIORITY_KEYWORDS, key=len, reverse=True)) + r")\b"
    r"|\d+\+?\s*years?",
    flags=re.IGNORECASE,
)

DOMAIN_KEYWORDS = [
    "fintech",
    "banking",
    "payments",
    "insurance",
    "e-commerce",
    "ecommerce",
    "retail",
    "healthcare",
    "logistics",
    "education",
    "gaming",
    "telecommunications",
    "real estate",
    "machine learning",
    "data analytics",
    "cybersecurity",
    "blockchain",
    "iot",
    "saas",
    "cloud",
]

SOFT_SKILL_KEYWORDS = [
    "communication",
    "teamwork",
    "collaboration",
    "leadership",
    "mentoring",
    "problem solving",
    "problem-solving",
    "critical thinking",
    "time management",
    "adaptability",
    "attention to detail",
    "ownership",
]

JobLike = Union[LegacyJobRecord, AIEnhancedJobRecord]


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------


def _enhanced_languages(job: LegacyJobRecord) -> List[EnhancedLanguageRequirement]:
    return [
        req if isinstance(req, EnhancedLanguageRequirement) else EnhancedLanguageRequirement.model_validate(dict(req))
        for req in job.language_requirements
    ]


def migrate_to_ai_enhanced_job(job: JobLike) -> AIEnhancedJobRecord:
    """Copy every legacy field and fill each absent AI field with its default.

    Language requirements gain `required=False` unless they already carry a flag.
    `experience` is back-filled from `minYearsExperience` (0 counts as unknown).
    """
    data: Dict[str, Any] = dict(job)
    data["language_requirements"] = _enhanced_languages(job)

    if data.get("extracted_skills") is None:
        data["extracted_skills"] = DEFAULT_EXTRACTED_SKILLS
    if data.get("scoring_weights") is None:
        data["scoring_weights"] = DEFAULT_SCORING_WEIGHTS
    if data.get("experience") is None:
        data["experience"] = ExperienceRange(min=job.min_years_experience or None)

    return AIEnhancedJobRecord.model_validate(data)


def populate_experience_from_legacy(job: AIEnhancedJobRecord) -> AIEnhancedJobRecord:
    """Set `experience.min` from `minYearsExperience` when it is unset. Never overwrites."""
    legacy_min = job.min_years_experience or None
    if job.experience is None:
        return job.model_copy(update={"experience": ExperienceRange(min=legacy_min)})
    if job.experience.min is None and legacy_min is not None:
        return job.model_copy(update={"experience": job.experience.model_copy(update={"min": legacy_min})})
    return job


def find_seniority_signals(text: str) -> List[str]:
    """Seniority keywords and "N+ years" phrases in order of appearance."""
    return [m.group(0).lower() for m in _SENIORITY_RE.finditer(text or "")]


def extract_seniority_signals(job: AIEnhancedJobRecord) -> AIEnhancedJobRecord:
    """Append signals found in the title, then the overview, to `experience.senioritySignals`."""
    experience = job.experience or DEFAULT_EXPERIENCE_RANGE
    found = find_seniority_signals(job.title) + find_seniority_signals(job.job_overview)
    signals = uniq_preserve_order([*experience.seniority_signals, *found])
    return job.model_copy(update={"experience": experience.model_copy(update={"seniority_signals": signals})})


def mark_required_languages(job: AIEnhancedJobRecord) -> AIEnhancedJobRecord:
    """A language with a certificate attached is required."""
    reqs = [
        req if req.required or req.certificate is None else req.model_copy(update={"required": True})
        for req in job.language_requirements
    ]
    return job.model_copy(update={"language_requirements": reqs})


def generate_job_text_for_matching(job: AIEnhancedJobRecord) -> str:
    """Build the text the matching engine embeds.

    Parts are joined with ". " in a fixed order; changing it changes every
    downstream embedding.
    """
    parts: List[str] = [f"{job.title} at {job.company_name}"]

    if job.job_overview:
        parts.append(job.job_overview)

    if job.responsibilities:
        parts.append("Responsibilities: " + ". ".join(job.responsibilities))

    if job.requirements.required:
        parts.append("Required: " + ". ".join(job.requirements.required))
    if job.requirements.preferred:
        parts.append("Preferred: " + ". ".join(job.requirements.preferred))

    skills = job.extracted_skills
    if skills is not None:
        if skills.core:
            parts.append("Core skills: " + ", ".join(skills.core))
        if skills.tools:
            parts.append("Tools: " + ", ".join(skills.tools))
        if skills.domain:
            parts.append("Domain: " + ", ".join(skills.domain))

    if skills is None or not skills.core:
        tech = job.technology_stack.names()
        if tech:
            parts.append("Technologies: " + ", ".join(tech))

    if job.experience is not None and job.experience.raw:
        parts.append("Experience: " + job.experience.raw)
    elif job.min_years_experience > 0:
        parts.append(f"Experience: {job.min_years_experience}+ years")

    if job.language_requirements:
        langs = ", ".join(f"{req.language} ({req.proficiency})" for req in job.language_requirements)
        parts.append("Languages: " + langs)

    return ". ".join(parts)


def has_ai_enhancements(job: JobLike) -> bool:
    return getattr(job, "extracted_skills", None) is not None or getattr(job, "scoring_weights", None) is not None


def has_extracted_skills(job: JobLike) -> bool:
    skills = getattr(job, "extracted_skills", None)
    if skills is None:
        return False
    return bool(skills.core or skills.tools or skills.domain or skills.soft)


# ---------------------------------------------------------------------------
# Range checks
# ---------------------------------------------------------------------------

WEIGHT_NAMES = ("required", "preferred", "techStack", "extractedCore", "extractedTools")
MAX_EXPERIENCE_RANGE_YEARS = 50


def _as_json(value: Union[ScoringWeights, ExperienceRange, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(value, (ScoringWeights, ExperienceRange)):
        return value.model_dump(by_alias=True)
    return {_camel_key(k): v for k, v in value.items()}


def _camel_key(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def validate_scoring_weights(weights: Union[ScoringWeights, Mapping[str, Any]]) -> ListResult:
    """Every declared weight must lie in [0.0, 1.0]; missing ones are skipped."""
    data = _as_json(weights)
    errors = []
    for name in WEIGHT_NAMES:
        value = data.get(name)
        if value is None:
            continue
        if not _is_number(value):
            errors.append(f"{name} must be a number, got {value!r}")
        elif value < 0 or value > 1:
            errors.append(f"{name} must be between 0.0 and 1.0, got {value}")
    return ListResult(valid=not errors, errors=errors)


def validate_experience_range(experience: Union[ExperienceRange, Mapping[str, Any]]) -> ListResult:
    data = _as_json(experience)
    low, high = data.get("min"), data.get("max")
    errors = []
    if low is not None and not _is_number(low):
        errors.append("Minimum experience must be a number")
        low = None
    if high is not None and not _is_number(high):
        errors.append("Maximum experience must be a number")
        high = None

    if low is not None:
        if low < 0:
            errors.append("Minimum experience cannot be negative")
        if low > MAX_EXPERIENCE_RANGE_YEARS:
            errors.append("Minimum experience cannot exceed 50 years")

    if high is not None:
        if high < 0:
            errors.append("Maximum experience cannot be negative")
        if high > MAX_EXPERIENCE_RANGE_YEARS:
            errors.append("Maximum experience cannot exceed 50 years")

    if low is not None and high is not None and low > high:
        errors.append("Minimum experience cannot be greater than maximum")

    return ListResult(valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Rule-based skill extraction
# ---------------------------------------------------------------------------


def _keyword_hits(text: str, vocabulary: Iterable[str]) -> List[str]:
    hits = []
    for kw in vocabulary:
        if re.search(r"\b" + re.escape(kw) + r"\b", text):
            hits.append(kw.replace("problem-solving", "problem solving").replace("ecommerce", "e-commerce"))
    return uniq_preserve_order(hits)


def extract_skills(job: AIEnhancedJobRecord, now: Optional[datetime] = None) -> AIEnhancedJobRecord:
    """Fill `extractedSkills` from the tech stack and keyword vocabularies.

    Skills that were already extracted (by hand or by a model) are kept as they are.
    """
    if has_extracted_skills(job):
        return job

    stack = job.technology_stack
    core = uniq_preserve_order(t.name for t in [*stack.programming_languages, *stack.frameworks, *stack.databases])
    tools = uniq_preserve_order(t.name for t in stack.tools_platforms)

    blob = "\n".join(
        [job.title, job.job_overview, *job.responsibilities, *job.requirements.required, *job.requirements.preferred]
    ).lower()

    skills = ExtractedSkills(
        core=core,
        tools=tools,
        domain=_keyword_hits(blob, DOMAIN_KEYWORDS),
        soft=_keyword_hits(blob, SOFT_SKILL_KEYWORDS),
        source="rule",
    )
    metadata = ExtractionMetadata(
        extracted_at=(now or datetime.now(timezone.utc)).isoformat(),
        extractor_version=RULE_EXTRACTOR_VERSION,
    )
    return job.model_copy(update={"extracted_skills": skills, "extraction_metadata": metadata})


def enrich_job(job: JobLike, now: Optional[datetime] = None) -> AIEnhancedJobRecord:
    """Run the enrichment steps in order and regenerate the matching text."""
    if not isinstance(job, AIEnhancedJobRecord):
        job = migrate_to_ai_enhanced_job(job)

    job = populate_experience_from_legacy(job)
    job = extract_seniority_signals(job)
    job = mark_required_languages(job)
    job = extract_skills(job, now=now)
    return job.model_copy(update={"job_text_for_matching": generate_job_text_for_matching(job)})


# ---------------------------------------------------------------------------
# Bulk migration
# ---------------------------------------------------------------------------

_AI_FIELDS = (
    ("extractedSkills", "extracted_skills", ExtractedSkills),
    ("scoringWeights", "scoring_weights", ScoringWeights),
    ("experience", "experience", ExperienceRange),
    ("extractionMetadata", "extraction_metadata", ExtractionMetadata),
)


def _existing_ai_fields(raw: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, field, model in _AI_FIELDS:
        value = raw.get(key)
        if not isinstance(value, dict):
            continue
        try:
            out[field] = model.model_validate(value)
        except ValidationError as exc:
            logger.warning("Ignoring malformed %s on record %s: %s", key, raw.get("id"), exc.error_count())
    return out


def migrate_record(raw: Any, now: Optional[datetime] = None) -> AIEnhancedJobRecord:
    """Read one raw record (legacy or already enhanced) into the enhanced schema. Never raises."""
    if not isinstance(raw, Mapping):
        return migrate_to_ai_enhanced_job(normalize_job(raw, now))

    fields = legacy_record_fields(raw, now)
    fields.update(_existing_ai_fields(raw))
    try:
        record = AIEnhancedJobRecord.model_validate(fields)
    except ValidationError as exc:
        logger.warning("Record %s needs the lenient path: %s", fields["id"], exc.error_count())
        record = normalize_job(raw, now)
    return migrate_to_ai_enhanced_job(record)


def migrate_records(raw_records: Iterable[Any], now: Optional[datetime] = None) -> List[AIEnhancedJobRecord]:
    """Migrate and enrich a batch of stored records."""
    out = [enrich_job(migrate_record(raw, now), now=now) for raw in raw_records]
    logger.info("Migrated %d job records", len(out))
    return out
