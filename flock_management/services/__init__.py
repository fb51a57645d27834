"""
Flock batch engine services.

- batch_registry: create/update/deactivate/read flock batches
- timeline: batch events and brooding-count derivation
- mortality_ledger: death records and current_count adjustments
- mirror: best-effort projections into the flock timeline and expense ledger
"""
