"""
TextSync Test Suite
===================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → Tests for textsync.core (config, models)
    ├── test_infrastructure/→ Tests for textsync.infrastructure (artifact store)
    ├── test_integrations/  → Tests for textsync.integrations (GitHub client, mock)
    ├── test_sync/          → Tests for textsync.sync (synchronizer protocol)
    ├── test_api/           → Tests for textsync.api (HTTP routes)
    ├── test_integration/   → End-to-end tests over a fake GitHub API
    ├── test_facade.py      → Tests for textsync.facade
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_sync/         # Run only synchronizer tests
    pytest --cov=textsync           # Run with coverage report
"""
