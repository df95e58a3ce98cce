"""CLI entry point.

Runs job forms and stored records through the pipeline, JSON in and JSON out.

Examples:
    python run_pipeline.py review form.json
    python run_pipeline.py submit form.json --out job.json
    python run_pipeline.py submit form.json --out job.json --store
    python run_pipeline.py migrate legacy_jobs.json --out enhanced_jobs.json

`review` prints validation errors, warnings and the quality score. `submit` writes
`{"legacy": ..., "enhanced": ...}`; it exits with status 1 when the form has
blocking errors. `migrate` reads a list of stored records and writes them in the
AI-enhanced schema.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from job_pipeline.config import settings
from job_pipeline.enrich import migrate_records
from job_pipeline.exceptions import JobValidationError, StoreError
from job_pipeline.formatters import describe_job
from job_pipeline.log import setup_logging
from job_pipeline.models import AIEnhancedJobRecord
from job_pipeline.pipeline import review_job_form, submit_job_form
from job_pipeline.store import JobStoreClient

logger = logging.getLogger("run_pipeline")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Validate, score, submit and migrate job records.")
    p.add_argument("--log-level", type=str, default=settings.log_level, help="Logging level.")
    p.add_argument("--log-json", action="store_true", default=settings.log_json, help="Emit JSON log lines.")
    sub = p.add_subparsers(dest="command", required=True)

    review = sub.add_parser("review", help="Validate and score a job form.")
    review.add_argument("form", type=str, help="Path to a job form JSON file.")

    submit = sub.add_parser("submit", help="Gate a form and build its legacy and enhanced records.")
    submit.add_argument("form", type=str, help="Path to a job form JSON file.")
    submit.add_argument("--out", type=str, default="job.json", help="Output JSON file path.")
    submit.add_argument("--store", action="store_true", help="Also create the record in the job store.")

    migrate = sub.add_parser("migrate", help="Migrate stored records to the AI-enhanced schema.")
    migrate.add_argument("records", type=str, help="Path to a JSON list of stored records.")
    migrate.add_argument("--out", type=str, default="enhanced_jobs.json", help="Output JSON file path.")
    return p.parse_args()


def read_json(path: str) -> Any:
    return json.loads(Path(path).expanduser().read_text(encoding="utf-8"))


def write_json(path: str, data: Any) -> Path:
    out_path = Path(path).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return out_path


def dump(model: Any, exclude_none: bool = True) -> Any:
    return model.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


def dump_enhanced(job: AIEnhancedJobRecord) -> Any:
    """Enhanced records keep their null defaults so every documented key is present."""
    return dump(job, exclude_none=False)


def cmd_review(args: argparse.Namespace) -> int:
    review = review_job_form(read_json(args.form))
    print(json.dumps(dump(review.validation), indent=2, ensure_ascii=False))
    print(f"Quality score: {review.quality.total_score}/100")
    for line in review.quality.overall_suggestions:
        print(line)
    for category in review.quality.breakdown:
        for suggestion in category.suggestions:
            print(f"- [{category.category}] {suggestion}")
    return 0 if review.validation.valid else 1


def cmd_submit(args: argparse.Namespace) -> int:
    store = JobStoreClient() if args.store else None
    try:
        legacy, enhanced = submit_job_form(read_json(args.form), store=store)
    except JobValidationError as exc:
        logger.error(exc.message)
        print(json.dumps(exc.details, indent=2, ensure_ascii=False))
        return 1
    except StoreError as exc:
        logger.error(exc.message)
        return 1

    out_path = write_json(args.out, {"legacy": dump(legacy), "enhanced": dump_enhanced(enhanced)})
    print(f"Wrote job {legacy.id} ({describe_job(legacy)}) to: {out_path}")
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    raw = read_json(args.records)
    if not isinstance(raw, list):
        raw = [raw]
    jobs = migrate_records(raw)
    for job in jobs:
        logger.debug("Migrated %s: %s", job.id, describe_job(job))
    out_path = write_json(args.out, [dump_enhanced(j) for j in jobs])
    print(f"Wrote {len(jobs)} jobs to: {out_path}")
    return 0


COMMANDS = {"review": cmd_review, "submit": cmd_submit, "migrate": cmd_migrate}


def main() -> None:
    args = parse_args()
    setup_logging(args.log_level, json_format=args.log_json)
    sys.exit(COMMANDS[args.command](args))


if __name__ == "__main__":
    main()
