"""
Test cases for migration to the AI-enhanced schema and enrichment
"""
import json

from job_pipeline.enrich import (
    DEFAULT_SCORING_WEIGHTS,
    RULE_EXTRACTOR_VERSION,
    enrich_job,
    extract_seniority_signals,
    extract_skills,
    find_seniority_signals,
    generate_job_text_for_matching,
    has_ai_enhancements,
    has_extracted_skills,
    mark_required_languages,
    migrate_record,
    migrate_records,
    migrate_to_ai_enhanced_job,
    populate_experience_from_legacy,
    validate_experience_range,
    validate_scoring_weights,
)
from job_pipeline.models import AIEnhancedJobRecord, ExperienceRange, ExtractedSkills, ScoringWeights
from job_pipeline.pipeline import gate_job_form
from job_pipeline.records import build_legacy_record


class TestMigration:
    """Test cases for migrate_to_ai_enhanced_job"""

    def test_defaults_are_filled(self, legacy_record):
        """Test that absent AI fields get their defaults"""
        job = migrate_to_ai_enhanced_job(legacy_record)
        assert isinstance(job, AIEnhancedJobRecord)
        assert job.extracted_skills == ExtractedSkills()
        assert job.scoring_weights == DEFAULT_SCORING_WEIGHTS
        assert job.experience.min == 3
        assert [r.required for r in job.language_requirements] == [False, False]

    def test_legacy_fields_are_copied(self, legacy_record):
        """Test that every legacy field survives migration"""
        job = migrate_to_ai_enhanced_job(legacy_record)
        for field in type(legacy_record).model_fields:
            if field == "language_requirements":
                continue
            assert getattr(job, field) == getattr(legacy_record, field), field

    def test_idempotent(self, legacy_record):
        """Test that migrating twice changes nothing"""
        once = migrate_to_ai_enhanced_job(legacy_record)
        assert migrate_to_ai_enhanced_job(once) == once

    def test_existing_fields_are_kept(self, legacy_record):
        """Test that migration never overwrites AI fields that are present"""
        weights = ScoringWeights(required=0.9)
        job = migrate_to_ai_enhanced_job(legacy_record)
        job = job.model_copy(update={"scoring_weights": weights})
        assert migrate_to_ai_enhanced_job(job).scoring_weights == weights

    def test_zero_experience_is_unknown(self, legacy_record):
        """Test that zero years does not become a minimum"""
        job = migrate_to_ai_enhanced_job(legacy_record.model_copy(update={"min_years_experience": 0}))
        assert job.experience.min is None

    def test_input_is_not_modified(self, legacy_record):
        """Test that migration returns a new record"""
        migrate_to_ai_enhanced_job(legacy_record)
        assert not has_ai_enhancements(legacy_record)


class TestEnrichmentSteps:
    """Test cases for the individual enrichment steps"""

    def test_populate_experience(self, enhanced_without_experience):
        """Test that experience is back-filled from minYearsExperience"""
        job = populate_experience_from_legacy(enhanced_without_experience)
        assert job.experience.min == 7
        assert enhanced_without_experience.experience is None

    def test_populate_never_overwrites(self, enhanced_without_experience):
        """Test that an existing minimum is kept"""
        job = enhanced_without_experience.model_copy(update={"experience": ExperienceRange(min=2)})
        assert populate_experience_from_legacy(job).experience.min == 2

    def test_populate_fills_missing_min(self, enhanced_without_experience):
        """Test that an experience block without a minimum gets one"""
        job = enhanced_without_experience.model_copy(update={"experience": ExperienceRange(raw="5-8 years")})
        experience = populate_experience_from_legacy(job).experience
        assert experience.min == 7
        assert experience.raw == "5-8 years"

    def test_find_seniority_signals(self):
        """Test keywords and year phrases in order of appearance"""
        assert find_seniority_signals("Lead engineer with 5+ years, mid-level") == ["lead", "5+ years", "mid"]

    def test_seniority_words_need_boundaries(self):
        """Test that keywords inside other words are ignored"""
        assert find_seniority_signals("Ahead of the midterm internship") == []

    def test_signals_are_deduplicated(self, legacy_record):
        """Test that repeated keywords are reported once"""
        job = migrate_to_ai_enhanced_job(legacy_record.model_copy(update={"title": "Senior Senior Developer"}))
        assert extract_seniority_signals(job).experience.seniority_signals == ["senior"]

    def test_signals_title_then_overview(self, legacy_record):
        """Test that title signals come before overview signals"""
        job = migrate_to_ai_enhanced_job(
            legacy_record.model_copy(
                update={"title": "Lead Developer", "job_overview": "Junior friendly team, 2 years minimum"}
            )
        )
        signals = extract_seniority_signals(job).experience.seniority_signals
        assert signals == ["lead", "junior", "2 years"]

    def test_mark_required_languages(self, legacy_record):
        """Test that a certificate makes a language required"""
        job = mark_required_languages(migrate_to_ai_enhanced_job(legacy_record))
        assert [(r.language, r.required) for r in job.language_requirements] == [
            ("English", True),
            ("Japanese", False),
        ]

    def test_matching_text(self, legacy_record):
        """Test the exact matching text layout"""
        job = migrate_to_ai_enhanced_job(legacy_record)
        assert generate_job_text_for_matching(job) == (
            "Backend Developer at Acme. Build APIs. Responsibilities: Design APIs. Write tests. "
            "Required: Python. Technologies: Python, Docker. Experience: 3+ years. "
            "Languages: English (FLUENT), Japanese (BASIC)"
        )

    def test_matching_text_prefers_extracted_skills(self, legacy_record):
        """Test that extracted core skills replace the raw technology list"""
        job = migrate_to_ai_enhanced_job(legacy_record).model_copy(
            update={
                "extracted_skills": ExtractedSkills(core=["Python"], tools=["Docker"], domain=["fintech"]),
                "experience": ExperienceRange(min=3, raw="3-5 years"),
            }
        )
        text = generate_job_text_for_matching(job)
        assert "Core skills: Python. Tools: Docker. Domain: fintech" in text
        assert "Technologies:" not in text
        assert "Experience: 3-5 years" in text

    def test_has_helpers(self, legacy_record):
        """Test has_ai_enhancements and has_extracted_skills"""
        assert has_ai_enhancements(legacy_record) is False
        job = migrate_to_ai_enhanced_job(legacy_record)
        assert has_ai_enhancements(job) is True
        assert has_extracted_skills(job) is False
        assert has_extracted_skills(extract_skills(job)) is True


class TestRangeChecks:
    """Test cases for weight and experience range checks"""

    def test_default_weights_are_valid(self):
        """Test that the defaults pass"""
        assert validate_scoring_weights(ScoringWeights()).valid is True

    def test_out_of_range_weights(self):
        """Test that weights outside [0, 1] are reported by their JSON name"""
        result = validate_scoring_weights({"required": 1.2, "tech_stack": -0.1})
        assert result.errors == [
            "required must be between 0.0 and 1.0, got 1.2",
            "techStack must be between 0.0 and 1.0, got -0.1",
        ]

    def test_inverted_experience_range(self):
        """Test that min above max is rejected"""
        assert validate_experience_range({"min": 10, "max": 5}).errors == [
            "Minimum experience cannot be greater than maximum"
        ]

    def test_experience_bounds(self):
        """Test the negative and upper bounds"""
        assert validate_experience_range(ExperienceRange(min=-1, max=60)).errors == [
            "Minimum experience cannot be negative",
            "Maximum experience cannot exceed 50 years",
        ]

    def test_open_range(self):
        """Test that missing bounds are fine"""
        assert validate_experience_range(ExperienceRange()).valid is True

    def test_non_numeric_weights(self):
        """Test that non-numeric weights are reported instead of compared"""
        result = validate_scoring_weights({"required": "high", "preferred": 0.4})
        assert result.valid is False
        assert result.errors == ["required must be a number, got 'high'"]

    def test_non_numeric_experience(self):
        """Test that non-numeric bounds are reported and the rest still checked"""
        result = validate_experience_range({"min": "many", "max": 60})
        assert result.errors == [
            "Minimum experience must be a number",
            "Maximum experience cannot exceed 50 years",
        ]


class TestExtractSkills:
    """Test cases for rule-based skill extraction"""

    def test_from_stack_and_text(self, form_data, now):
        """Test that skills come from the stack and the keyword vocabularies"""
        legacy = build_legacy_record(gate_job_form(form_data, now=now), now=now)
        job = extract_skills(migrate_to_ai_enhanced_job(legacy), now=now)
        skills = job.extracted_skills
        assert skills.core == ["Python", "Go", "FastAPI", "Django", "PostgreSQL", "Redis"]
        assert skills.tools == ["Docker", "Kubernetes"]
        assert "fintech" in skills.domain
        assert "communication" in skills.soft
        assert skills.source == "rule"
        assert job.extraction_metadata.extracted_at == now.isoformat()
        assert job.extraction_metadata.extractor_version == RULE_EXTRACTOR_VERSION

    def test_existing_skills_are_kept(self, legacy_record):
        """Test that manual skills are never replaced"""
        job = migrate_to_ai_enhanced_job(legacy_record).model_copy(
            update={"extracted_skills": ExtractedSkills(core=["Go"], source="manual")}
        )
        assert extract_skills(job) is job


class TestEnrichJob:
    """Test cases for enrich_job and bulk migration"""

    def test_enrich_legacy_record(self, legacy_record, now):
        """Test that every step runs and the matching text is regenerated"""
        job = enrich_job(legacy_record, now=now)
        assert job.experience.min == 3
        assert job.language_requirements[0].required is True
        assert job.extracted_skills.core == ["Python"]
        assert job.job_text_for_matching == generate_job_text_for_matching(job)
        assert "Core skills: Python. Tools: Docker" in job.job_text_for_matching

    def test_enrich_fills_experience(self, enhanced_without_experience, now):
        """Test that enrichment back-fills experience before writing the text"""
        job = enrich_job(enhanced_without_experience, now=now)
        assert job.experience.min == 7
        assert "Experience: 7+ years" in job.job_text_for_matching

    def test_migrate_record_keeps_ai_fields(self, now):
        """Test that an already-enhanced raw record keeps its AI fields and language flags"""
        job = migrate_record(
            {
                "id": "job-5",
                "title": "Go Developer",
                "extractedSkills": {"core": ["Go"], "source": "manual"},
                "scoringWeights": {"required": 0.7},
                "languageRequirements": [
                    {"language": "English", "languageCode": "en", "proficiency": "FLUENT", "required": True}
                ],
            },
            now=now,
        )
        assert job.extracted_skills.core == ["Go"]
        assert job.extracted_skills.source == "manual"
        assert job.scoring_weights.required == 0.7
        assert job.language_requirements[0].required is True

    def test_migrate_records_is_total(self, now):
        """Test that bulk migration never raises on malformed input"""
        raw = [
            None,
            "not a record",
            {"title": 5},
            {"id": "x", "extractedSkills": {"core": "not a list"}},
            {"id": "y", "experience": {"min": "many"}},
            json.loads('{"id": "inf", "minYearsExperience": 1e400}'),
            json.loads('{"id": "nan", "requiredExperience": NaN}'),
            {"id": "b", "benefits": {"predefined": 5, "custom": 7}},
            {"id": "r", "requirements": {"required": 3}, "languageRequirements": "English"},
        ]
        jobs = migrate_records(raw, now=now)
        assert len(jobs) == 9
        for job in jobs:
            assert isinstance(job, AIEnhancedJobRecord)
            assert job.scoring_weights is not None
            assert job.job_text_for_matching
        assert [j.min_years_experience for j in jobs[5:7]] == [0, 0]
        assert jobs[7].benefits.predefined == []
