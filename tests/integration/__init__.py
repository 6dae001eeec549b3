"""
Integration Tests - ResilienceEngine with real components.
"""
