"""
Features package - each sub-package encapsulates a self-contained feature.

Convention:
  features/<feature_name>/
    __init__.py      - public API re-exports
    store.py         - state owned by the feature (if applicable)
    tracker.py       - runtime tracking / state management (if applicable)
"""
