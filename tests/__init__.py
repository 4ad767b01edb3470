"""FocusForge Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - storage/: Normalizer, key-value stores, self-healing records, settings, backups
  - gamification/: XP curve, streak ledger, profile lifecycle
  - tasks/: Task manager
  - focus/: Pomodoro helpers
  - ai/: Decomposition boundary (rules and HTTP)
  - security/: Rate limiter
  - cli/: Command line interface
- integration/: End-to-end flows through ProgressTracker

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/gamification/

    # Excluding integration tests
    pytest -m "not integration"
"""
