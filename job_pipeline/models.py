"""Data models for the job record pipeline.

Each stage of a posting's life has its own immutable type:

    JobForm -> NormalizedJobForm -> ValidatedJobForm -> LegacyJobRecord -> AIEnhancedJobRecord

Transforms between stages are pure functions elsewhere in the package; nothing here
mutates. Attribute names are snake_case; the JSON contract (what the authoring UI
sends and what the record store persists) is camelCase, produced by
`model_dump(mode="json", by_alias=True)`.

This file uses Pydantic v2.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


JobLevel = Literal["INTERN", "JUNIOR", "MID", "SENIOR", "LEAD", "MANAGER"]
EmploymentType = Literal["FULL_TIME", "PART_TIME", "CONTRACT", "TEMP", "FREELANCE"]
EducationLevel = Literal["HIGH_SCHOOL", "ASSOCIATE", "BACHELOR", "MASTER", "PHD", "NONE"]
WorkMode = Literal["ONSITE", "REMOTE", "HYBRID"]
JobStatus = Literal["DRAFT", "PUBLISHED"]
LanguageProficiency = Literal["BASIC", "INTERMEDIATE", "FLUENT", "NATIVE"]
TechProficiency = Literal["BASIC", "INTERMEDIATE", "ADVANCED"]
# The authoring form uses lower-case methods, persisted records upper-case.
FormApplyMethod = Literal["platform", "email", "link"]
ApplyMethod = Literal["PLATFORM", "EMAIL", "LINK"]
SkillExtractionSource = Literal["manual", "rule", "llm"]

TECH_BUCKETS = ("programming_languages", "frameworks", "databases", "tools_platforms")


class StageModel(BaseModel):
    """Base for every pipeline model: frozen, camelCase on the wire, nulls mean "absent"."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON null and a missing key both take the field default.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------


class Occupation(StageModel):
    taxonomy: Optional[str] = None
    code: str = ""
    label: str = ""


class Industry(StageModel):
    taxonomy: Optional[str] = None
    version: str = ""
    code: str = ""
    label: str = ""


class LocationDetails(StageModel):
    city: str = ""
    country: str = ""
    code: Optional[str] = None


class LanguageCertificate(StageModel):
    type: str = ""
    score: str = Field(default="", validation_alias=AliasChoices("score", "scoreOrLevel"))
    custom_name: Optional[str] = None


class LanguageRequirement(StageModel):
    language: str = ""
    language_code: str = ""
    proficiency: str = ""
    certificate: Optional[LanguageCertificate] = None


class EnhancedLanguageRequirement(LanguageRequirement):
    required: bool = False


class TechCertificate(StageModel):
    name: str = ""
    level: Optional[str] = None


class TechnologyItem(StageModel):
    name: str = ""
    proficiency: Optional[str] = None
    certificate: Optional[TechCertificate] = None


class TechnologyStack(StageModel):
    programming_languages: List[TechnologyItem] = Field(default_factory=list)
    frameworks: List[TechnologyItem] = Field(default_factory=list)
    databases: List[TechnologyItem] = Field(default_factory=list)
    tools_platforms: List[TechnologyItem] = Field(default_factory=list)

    def all_items(self) -> List[TechnologyItem]:
        """Flatten the four buckets in their fixed order."""
        return [*self.programming_languages, *self.frameworks, *self.databases, *self.tools_platforms]

    def names(self) -> List[str]:
        return [item.name for item in self.all_items()]


class SalaryRange(StageModel):
    # Raw forms may carry amounts as strings; `normalize_salary` turns them into ints.
    min: Union[int, float, str] = 0
    max: Union[int, float, str] = 0
    currency: str = "USD"
    negotiable: bool = False
    type: str = "GROSS"


# ---------------------------------------------------------------------------
# Authoring stages
# ---------------------------------------------------------------------------


class JobForm(StageModel):
    """The HR-authored draft exactly as the posting wizard submits it.

    Enum-like fields are free strings here; nothing has been trimmed or checked.
    The wizard keeps the tech stack as four flat lists, which are lifted into
    `technology_stack` on the way in.
    """

    title: str = ""
    company: str = Field(default="", validation_alias=AliasChoices("company", "companyName"))
    occupation: Optional[Occupation] = None
    industries: List[Industry] = Field(default_factory=list)
    job_level: Optional[str] = None
    employment_type: Optional[str] = None
    required_experience: Union[int, str] = 0
    education_level: Optional[str] = None
    language_requirements: List[LanguageRequirement] = Field(default_factory=list)
    work_mode: Optional[str] = None
    location: Optional[LocationDetails] = None
    salary: Optional[SalaryRange] = None

    job_overview: str = ""
    responsibilities: List[str] = Field(default_factory=list)
    required_qualifications: List[str] = Field(default_factory=list)
    preferred_qualifications: List[str] = Field(default_factory=list)
    technology_stack: TechnologyStack = Field(default_factory=TechnologyStack)

    benefits: List[str] = Field(default_factory=list, description="Ids of predefined benefits.")
    custom_benefits: List[str] = Field(default_factory=list)
    working_time: str = ""

    application_deadline: str = ""
    number_of_hires: Union[int, str] = 1
    apply_method: str = "platform"
    apply_email: str = ""
    apply_link: str = ""
    job_status: str = "DRAFT"

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_tech_stack(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "technologyStack" in data or "technology_stack" in data:
            return data
        flat_keys = {
            "programmingLanguages": "programmingLanguages",
            "frameworks": "frameworks",
            "databases": "databases",
            "toolsPlatforms": "toolsPlatforms",
        }
        if not any(k in data for k in flat_keys):
            return data
        lifted = {k: v for k, v in data.items() if k not in flat_keys}
        lifted["technologyStack"] = {k: data[k] for k in flat_keys if data.get(k) is not None}
        return lifted


class NormalizedJobForm(JobForm):
    """A form after `normalize_job_form`: trimmed, de-duplicated, enums canonical."""

    job_level: Optional[JobLevel] = None
    employment_type: Optional[EmploymentType] = None
    education_level: Optional[EducationLevel] = None
    work_mode: Optional[WorkMode] = None
    required_experience: int = 0
    number_of_hires: int = 1
    apply_method: FormApplyMethod = "platform"
    job_status: JobStatus = "DRAFT"


class ValidatedJobForm(StageModel):
    """A normalized form that passed the blocking checks; warnings ride along."""

    form: NormalizedJobForm
    warnings: Dict[str, List[str]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Persisted record
# ---------------------------------------------------------------------------


class Requirements(StageModel):
    required: List[str] = Field(default_factory=list)
    preferred: List[str] = Field(default_factory=list)


class PredefinedBenefit(StageModel):
    id: str
    label: str = ""
    icon: str = ""


class Benefits(StageModel):
    predefined: List[PredefinedBenefit] = Field(default_factory=list)
    custom: List[str] = Field(default_factory=list)


class WorkingTime(StageModel):
    days: List[str] = Field(default_factory=list)
    start: str = ""
    end: str = ""
    timezone: str = ""
    note: Optional[str] = None


class ApplicationMethod(StageModel):
    method: ApplyMethod = "PLATFORM"
    email: Optional[str] = None
    link: Optional[str] = None


class JobMetadata(StageModel):
    created_at: str
    updated_at: str


class LegacyJobRecord(StageModel):
    """The normalized job record the store owns.

    Field names are stable; prefer adding new fields rather than changing existing
    ones once records are stored.
    """

    id: Union[str, int]
    title: str = ""
    company_name: str = ""
    job_level: JobLevel = "JUNIOR"
    employment_type: EmploymentType = "FULL_TIME"
    education_level: EducationLevel = "NONE"
    work_mode: WorkMode = "ONSITE"
    min_years_experience: int = 0
    language_requirements: List[LanguageRequirement] = Field(default_factory=list)
    location_details: LocationDetails = Field(default_factory=LocationDetails)
    job_overview: str = ""
    responsibilities: List[str] = Field(default_factory=list)
    requirements: Requirements = Field(default_factory=Requirements)
    technology_stack: TechnologyStack = Field(default_factory=TechnologyStack)
    benefits: Benefits = Field(default_factory=Benefits)
    salary: Optional[SalaryRange] = None
    working_time: Optional[WorkingTime] = None
    application_deadline: str = ""
    number_of_hires: int = 1
    apply: ApplicationMethod = Field(default_factory=ApplicationMethod)
    occupation: Optional[Occupation] = None
    industries: List[Industry] = Field(default_factory=list)
    status: JobStatus = "DRAFT"
    metadata: JobMetadata


# ---------------------------------------------------------------------------
# AI-enhanced record
# ---------------------------------------------------------------------------


class ExtractedSkills(StageModel):
    core: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    domain: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    synonyms: Optional[Dict[str, str]] = None
    source: Optional[SkillExtractionSource] = None


class ScoringWeights(StageModel):
    """How much each component contributes to a CV/job match. Each in [0.0, 1.0]."""

    required: float = 1.0
    preferred: float = 0.4
    tech_stack: float = 0.8
    extracted_core: float = 1.0
    extracted_tools: float = 0.8


class ExperienceRange(StageModel):
    min: Optional[int] = None
    max: Optional[int] = None
    raw: Optional[str] = Field(default=None, description='Free text such as "2-5 years".')
    seniority_signals: List[str] = Field(default_factory=list)


class ExtractionMetadata(StageModel):
    extracted_at: str
    extractor_version: str
    confidence: Optional[float] = None
    errors: Optional[List[str]] = None


class AIEnhancedJobRecord(LegacyJobRecord):
    """A legacy record plus the derived fields the matching engine consumes.

    Derived, never hand-edited: regenerate it whenever the legacy source changes.
    """

    language_requirements: List[EnhancedLanguageRequirement] = Field(default_factory=list)
    extracted_skills: Optional[ExtractedSkills] = None
    scoring_weights: Optional[ScoringWeights] = None
    experience: Optional[ExperienceRange] = None
    extraction_metadata: Optional[ExtractionMetadata] = None
    job_text_for_matching: Optional[str] = None
