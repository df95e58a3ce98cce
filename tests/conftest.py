"""
Shared fixtures for the job pipeline tests.
"""
import copy
from datetime import datetime, timezone

import pytest

from job_pipeline.models import (
    AIEnhancedJobRecord,
    JobMetadata,
    LanguageCertificate,
    LanguageRequirement,
    LegacyJobRecord,
    Requirements,
    TechnologyItem,
    TechnologyStack,
)

# 10:00 in Ho Chi Minh City on 15 Jan 2026.
FIXED_NOW = datetime(2026, 1, 15, 3, 0, tzinfo=timezone.utc)

VALID_FORM = {
    "title": "Senior Backend Developer",
    "company": "Acme Software",
    "occupation": {"code": "2512.2", "label": "Backend Developer"},
    "industries": [{"version": "2018", "code": "62.01", "label": "Computer programming activities"}],
    "jobLevel": "senior",
    "employmentType": "full-time",
    "requiredExperience": 5,
    "educationLevel": "bachelor",
    "workMode": "hybrid",
    "languageRequirements": [
        {
            "language": "English",
            "languageCode": "en",
            "proficiency": "FLUENT",
            "certificate": {"type": "IELTS", "score": "7.0"},
        },
        {"language": "Vietnamese", "languageCode": "vi", "proficiency": "NATIVE"},
    ],
    "location": {"city": "Ho Chi Minh City", "country": "Vietnam", "code": "VN-SG"},
    "salary": {"min": "2000", "max": "3500", "currency": "USD", "negotiable": False},
    "jobOverview": (
        "We are looking for an experienced backend engineer to design, build and operate the "
        "payment services that power our fintech platform. You will work closely with product "
        "managers and other engineers to ship reliable APIs used by millions of customers "
        "across Southeast Asia."
    ),
    "responsibilities": [
        "1. Design and maintain RESTful APIs for payment services",
        "2. Optimize PostgreSQL queries and database schemas",
        "- Review pull requests and mentor junior engineers",
        "- Collaborate with product managers on technical roadmaps",
        "• Monitor production systems and lead incident response",
    ],
    "requiredQualifications": [
        "5+ years of backend development experience with Python",
        "Solid understanding of relational databases and SQL",
        "Experience building and operating distributed systems",
        "Strong communication skills in English",
        "Hands-on experience with Docker and Kubernetes",
    ],
    "preferredQualifications": [
        "Experience in the fintech or banking industry",
        "Familiarity with event-driven architectures and Kafka",
        "Contributions to open source projects",
    ],
    "programmingLanguages": [{"name": "Python", "proficiency": "ADVANCED"}, {"name": "Go"}],
    "frameworks": [{"name": "FastAPI"}, {"name": "Django"}],
    "databases": [{"name": "PostgreSQL"}, {"name": "Redis"}],
    "toolsPlatforms": [{"name": "Docker"}, {"name": "Kubernetes"}],
    "benefits": ["health_insurance", "13th_month", "laptop_provided"],
    "customBenefits": ["Annual company trip", "Free English classes"],
    "workingTime": "Mon-Fri, 9:00-18:00",
    "applicationDeadline": "2026-02-28",
    "numberOfHires": "2",
    "applyMethod": "email",
    "applyEmail": "jobs@acme.example",
    "applyLink": "",
    "jobStatus": "PUBLISHED",
}


@pytest.fixture
def now():
    """A fixed 'now' so deadline checks are deterministic"""
    return FIXED_NOW


@pytest.fixture
def form_data():
    """A complete, publishable job form as the posting wizard sends it"""
    return copy.deepcopy(VALID_FORM)


@pytest.fixture
def legacy_record():
    """A small persisted record without any AI fields"""
    return LegacyJobRecord(
        id="job-1",
        title="Backend Developer",
        company_name="Acme",
        job_level="MID",
        min_years_experience=3,
        job_overview="Build APIs",
        responsibilities=["Design APIs", "Write tests"],
        requirements=Requirements(required=["Python"], preferred=[]),
        technology_stack=TechnologyStack(
            programming_languages=[TechnologyItem(name="Python")],
            tools_platforms=[TechnologyItem(name="Docker")],
        ),
        language_requirements=[
            LanguageRequirement(
                language="English",
                language_code="en",
                proficiency="FLUENT",
                certificate=LanguageCertificate(type="TOEIC", score="800"),
            ),
            LanguageRequirement(language="Japanese", language_code="ja", proficiency="BASIC"),
        ],
        metadata=JobMetadata(created_at="2026-01-01T00:00:00+00:00", updated_at="2026-01-01T00:00:00+00:00"),
    )


@pytest.fixture
def enhanced_without_experience(legacy_record):
    """An enhanced record whose experience block was never filled"""
    data = dict(legacy_record)
    data["language_requirements"] = [dict(r) for r in legacy_record.language_requirements]
    data["min_years_experience"] = 7
    return AIEnhancedJobRecord.model_validate(data)
