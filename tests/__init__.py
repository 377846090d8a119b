"""
Test Suite

Structure:
- tests/unit/: Tests for individual components (precision, signing, error
  classification, catalog, normalization, adapter, API routes)
- tests/conftest.py: FakeTransport and shared fixtures
- tests/payloads.py: Canned venue payloads

Uses pytest with pytest-asyncio for testing async functionality.
"""
