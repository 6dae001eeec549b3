"""
Facade Package - Single Entry Point for Error Recovery.

Exports:
    - ResilienceEngine: Composes all resilience components
    - create_engine: Factory from config object or YAML file
"""

from recovery_engine.facade.resilience_facade import ResilienceEngine, create_engine

__all__ = ["ResilienceEngine", "create_engine"]
