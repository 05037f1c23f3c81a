"""
Test Suite for the Risk Panel

Includes:
- Unit tests for calculations (analysis/tests)
- Collaborator tests with mocked network calls (ingestion/tests)
- Rendering tests (reports/tests)
- Shared synthetic series factories and CLI tests (tests/)
"""
