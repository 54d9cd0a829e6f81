"""
Error envelope tests: engine errors and framework errors both render as
{"success": false, "error": {...}}.
"""
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.test import APIRequestFactory

from core_backend.exceptions import (
    Conflict,
    InvalidTransition,
    InventoryRestoreFailed,
    NotFound,
    ValidationFailed,
    engine_exception_handler,
)


def _context(method="post", path="/api/orders/"):
    request = getattr(APIRequestFactory(), method)(path)
    return {"request": request, "view": None}


class TestEngineErrors:

    def test_default_codes_and_statuses(self):
        assert ValidationFailed("bad").code == "VALIDATION_FAILED"
        assert ValidationFailed("bad").status_code == 400
        assert NotFound("gone").status_code == 404
        assert Conflict("dup").status_code == 409
        assert InvalidTransition("no").code == "INVALID_TRANSITION"
        assert InvalidTransition("no").status_code == 409
        assert InventoryRestoreFailed("restore").status_code == 500

    def test_custom_code_and_details(self):
        error = NotFound("Order x not found", code="ORDER_NOT_FOUND", details={"order_id": "x"})

        payload = error.to_dict()

        assert payload["code"] == "ORDER_NOT_FOUND"
        assert payload["message"] == "Order x not found"
        assert payload["details"] == {"order_id": "x"}
        assert "timestamp" in payload


class TestExceptionHandler:

    def test_engine_error_rendered_as_tagged_error(self):
        response = engine_exception_handler(
            Conflict("Add-on 3 selected more than once", code="ADDON_ALREADY_ADDED"), _context()
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["success"] is False
        assert response.data["error"]["code"] == "ADDON_ALREADY_ADDED"

    def test_framework_validation_error_wrapped(self):
        exc = drf_exceptions.ValidationError({"quantity": ["Ensure this value is greater than or equal to 1."]})

        response = engine_exception_handler(exc, _context())

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["success"] is False
        assert response.data["error"]["code"] == "VALIDATION_FAILED"
        assert "quantity" in response.data["error"]["details"]

    def test_framework_not_found_wrapped(self):
        response = engine_exception_handler(drf_exceptions.NotFound(), _context("get", "/api/orders/x/"))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "NOT_FOUND"

    def test_method_not_allowed_is_request_failed(self):
        response = engine_exception_handler(drf_exceptions.MethodNotAllowed("PUT"), _context())

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert response.data["error"]["code"] == "REQUEST_FAILED"

    def test_unhandled_exception_returns_none(self):
        assert engine_exception_handler(RuntimeError("boom"), _context()) is None
