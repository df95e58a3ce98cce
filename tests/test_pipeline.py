"""
Test cases for the end-to-end pipeline
"""
import json

import httpx
import pytest

from job_pipeline.exceptions import JobValidationError
from job_pipeline.models import AIEnhancedJobRecord, LegacyJobRecord
from job_pipeline.pipeline import gate_job_form, review_job_form, submit_job_form
from job_pipeline.quality import BANNER_EXCELLENT
from job_pipeline.store import JobStoreClient


class TestReview:
    """Test cases for review_job_form"""

    def test_review_complete_form(self, form_data, now):
        """Test that a complete form reviews clean with a high score"""
        review = review_job_form(form_data, now=now)
        assert review.validation.valid is True
        assert review.quality.overall_suggestions == [BANNER_EXCELLENT]
        assert review.form.job_level == "SENIOR"

    def test_review_reports_without_raising(self, form_data, now):
        """Test that review returns errors instead of raising"""
        form_data["title"] = "qwerty"
        review = review_job_form(form_data, now=now)
        assert review.validation.valid is False
        assert "title" in review.validation.errors


class TestGate:
    """Test cases for gate_job_form"""

    def test_blocking_errors_raise(self, form_data, now):
        """Test that a form with errors cannot pass"""
        form_data["occupation"] = None
        form_data["applicationDeadline"] = "2026-01-01"
        with pytest.raises(JobValidationError) as exc_info:
            gate_job_form(form_data, now=now)
        exc = exc_info.value
        assert set(exc.errors) == {"occupation", "applicationDeadline"}
        assert exc.message == "Job form has blocking errors in: applicationDeadline, occupation"
        assert exc.details["errors"] == exc.errors

    def test_warnings_ride_along(self, form_data, now):
        """Test that warnings do not block and are kept on the result"""
        for key in ("programmingLanguages", "frameworks", "databases", "toolsPlatforms"):
            form_data.pop(key)
        validated = gate_job_form(form_data, now=now)
        assert list(validated.warnings) == ["technologyStack"]
        assert validated.form.title == "Senior Backend Developer"

    def test_draft_with_past_deadline_passes(self, form_data, now):
        """Test that drafts may keep an expired deadline"""
        form_data["jobStatus"] = "DRAFT"
        form_data["applicationDeadline"] = "2025-12-31"
        assert gate_job_form(form_data, now=now).form.job_status == "DRAFT"


class TestSubmit:
    """Test cases for submit_job_form"""

    def test_submit_without_store(self, form_data, now):
        """Test that submit builds both records"""
        legacy, enhanced = submit_job_form(form_data, now=now)
        assert isinstance(legacy, LegacyJobRecord)
        assert isinstance(enhanced, AIEnhancedJobRecord)
        assert enhanced.id == legacy.id
        assert enhanced.experience.min == 5
        assert "senior" in enhanced.experience.seniority_signals
        assert enhanced.job_text_for_matching.startswith("Senior Backend Developer at Acme Software. ")
        assert enhanced.language_requirements[0].required is True
        assert enhanced.language_requirements[1].required is False

    def test_submit_with_store(self, form_data, now):
        """Test that the stored record, with the store's id, is enriched"""
        posted = []

        def handler(request):
            body = json.loads(request.content)
            posted.append(body)
            return httpx.Response(201, json={**body, "id": 101})

        store = JobStoreClient(base_url="http://store.test/api", transport=httpx.MockTransport(handler))
        legacy, enhanced = submit_job_form(form_data, store=store, now=now)
        assert len(posted) == 1
        assert posted[0]["status"] == "PUBLISHED"
        assert legacy.id == 101
        assert enhanced.id == 101

    def test_invalid_form_is_never_stored(self, form_data, now):
        """Test that the store is not called for a blocked form"""

        def handler(request):
            raise AssertionError("store must not be called")

        store = JobStoreClient(base_url="http://store.test/api", transport=httpx.MockTransport(handler))
        form_data["company"] = ""
        with pytest.raises(JobValidationError):
            submit_job_form(form_data, store=store, now=now)
