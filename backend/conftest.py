"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest

from core_backend.celery import app as celery_app

# Run Celery tasks inline during tests; no broker needed
celery_app.conf.update(CELERY_TASK_ALWAYS_EAGER=True, CELERY_TASK_EAGER_PROPAGATES=True)


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def engine_settings(settings):
    """
    Pin engine settings for every test.

    No retry backoff so contention tests stay fast, and a known alert
    recipient so low-stock emails land in mailoutbox.
    """
    settings.POS_ENGINE = {
        "TRANSACTION_MAX_RETRIES": 3,
        "TRANSACTION_RETRY_BASE_DELAY": 0,
        "LOW_STOCK_ALERTS_ENABLED": True,
        "LOW_STOCK_ALERT_RECIPIENTS": ["kitchen@example.com"],
        "CURRENCY": "USD",
    }
    yield settings.POS_ENGINE


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/orders/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *  # noqa
