"""
Test Fixtures - Shared Test Data and Configurations.

This package contains reusable test fixtures:
    - sample_config.yaml: Shared app config with a recovery_engine section
    - config/profiles/strict.yaml: Profile overlay for loader tests
"""
