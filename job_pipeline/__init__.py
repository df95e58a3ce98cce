"""Job record data pipeline.

The package turns HR-authored job postings into records a matching engine can use:
- `models.py` defines the stage types (raw form -> normalized form -> legacy record
  -> AI-enhanced record).
- `heuristics.py`, `validation.py` and `quality.py` judge the raw text.
- `normalize.py` holds the deterministic, idempotent clean-up transforms.
- `records.py` and `enrich.py` build the persisted record and migrate it to the
  AI-enhanced shape.
- `pipeline.py` composes the stages: review, gate, submit.
- `store.py` and `taxonomy/` are thin adapters over the external collaborators.
"""
