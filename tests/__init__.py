"""
Test Suite for the Recovery Engine.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: ResilienceEngine end-to-end tests
    - fixtures/: Shared sample configuration

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest tests/integration/               # Integration tests only
"""
