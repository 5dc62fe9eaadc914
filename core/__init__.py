"""Core (UI-agnostic) AQI dashboard logic.

This package contains:
- data loading (CSV -> pandas, sample-data fallback)
- filter normalization and the record filter
- analysis and text insights
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
