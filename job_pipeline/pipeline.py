"""End-to-end composition of the stages.

    raw form -> normalize_job_form -> validate_job_form (+ quality score)
             -> gate_job_form -> build_legacy_record -> [store] -> enrich_job

No function here keeps state between calls; different records can go through
the pipeline concurrently.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple, Union

from .enrich import enrich_job, migrate_to_ai_enhanced_job
from .exceptions import JobValidationError
from .models import AIEnhancedJobRecord, JobForm, LegacyJobRecord, NormalizedJobForm, StageModel, ValidatedJobForm
from .normalize import normalize_job_form
from .quality import QualityScoreResult, calculate_quality_score
from .records import build_legacy_record
from .store import JobStoreClient
from .validation import FormValidationResult, validate_job_form

logger = logging.getLogger(__name__)

RawForm = Union[JobForm, Mapping[str, Any]]


class FormReview(StageModel):
    """What the author sees before confirming: blocking errors, warnings, score."""

    form: NormalizedJobForm
    validation: FormValidationResult
    quality: QualityScoreResult


def review_job_form(raw: RawForm, now: Optional[datetime] = None) -> FormReview:
    form = normalize_job_form(raw)
    return FormReview(
        form=form,
        validation=validate_job_form(form, now=now),
        quality=calculate_quality_score(form),
    )


def gate_job_form(form: RawForm, now: Optional[datetime] = None) -> ValidatedJobForm:
    """Let a form through only when it has no blocking errors.

    Raises:
        JobValidationError: with the field-keyed errors and warnings.
    """
    if not isinstance(form, NormalizedJobForm):
        form = normalize_job_form(form)

    result = validate_job_form(form, now=now)
    if not result.valid:
        raise JobValidationError(result.errors, result.warnings)
    if result.warnings:
        logger.info("Job form %r passed with warnings on: %s", form.title, ", ".join(result.warnings))
    return ValidatedJobForm(form=form, warnings=result.warnings)


def submit_job_form(
    raw: RawForm,
    store: Optional[JobStoreClient] = None,
    now: Optional[datetime] = None,
) -> Tuple[LegacyJobRecord, AIEnhancedJobRecord]:
    """Gate, build and (optionally) persist a form, then derive its enhanced record.

    When a store is given, the record it returns (with the store's id) is the one
    that gets enriched.
    """
    validated = gate_job_form(raw, now=now)
    legacy = build_legacy_record(validated, now=now)
    if store is not None:
        legacy = store.create_job(legacy)

    enhanced = enrich_job(migrate_to_ai_enhanced_job(legacy), now=now)
    logger.info("Submitted job %s (%s)", legacy.id, legacy.status)
    return legacy, enhanced
