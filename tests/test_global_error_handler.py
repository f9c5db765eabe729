import pytest
from unittest.mock import MagicMock, patch
from starlette.requests import Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi import FastAPI, status

from app.core.exceptions import NotFoundError, ServiceError
from app.core.global_error_handler import (
    service_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
    create_error_response,
    register_global_exception_handlers
)

# --- Mocking dependencies ---
@pytest.fixture
def mock_logger():
    with patch("app.core.global_error_handler.logger") as mock:
        yield mock

@pytest.fixture
def mock_traceback():
    with patch("app.core.global_error_handler.traceback") as mock:
        mock.format_exc.return_value = "Mocked Traceback"
        yield mock

@pytest.fixture
def mock_json_response():
    with patch("app.core.global_error_handler.JSONResponse") as mock:
        yield mock

@pytest.fixture
def mock_fastapi_app():
    mock_app = MagicMock(spec=FastAPI)
    mock_app.exception_handler = MagicMock()
    return mock_app

@pytest.fixture
def mock_request():
    request = MagicMock(spec=Request)
    request.method = "GET"
    request.url.path = "/test"
    return request

# --- Test Cases ---

def test_create_error_response():
    response = create_error_response("NOT_FOUND", "Not Found")
    assert response == {"success": False, "code": "NOT_FOUND", "data": None, "message": "Not Found"}

    response_with_details = create_error_response("VALIDATION_ERROR", "Validation failed", {"field": "email"})
    assert response_with_details["details"] == {"field": "email"}


def test_service_error_defaults():
    error = ServiceError("PATIENT_NOT_FOUND")
    assert error.status_code == 400
    assert error.message == "Patient not found"

    not_found = NotFoundError("APPOINTMENT_NOT_FOUND", "Appointment not found")
    assert not_found.status_code == 404
    assert not_found.code == "APPOINTMENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_service_exception_handler(mock_request, mock_logger, mock_json_response):
    exc = ServiceError("SUBSCRIPTION_LIMIT_EXCEEDED", status_code=403, message="Patients limit exceeded")

    await service_exception_handler(mock_request, exc)

    mock_logger.warning.assert_called_once()
    mock_json_response.assert_called_once_with(
        status_code=403,
        content={
            "success": False,
            "code": "SUBSCRIPTION_LIMIT_EXCEEDED",
            "data": None,
            "message": "Patients limit exceeded",
        },
    )


@pytest.mark.asyncio
async def test_http_exception_handler(mock_request, mock_logger, mock_json_response):
    exc = StarletteHTTPException(status_code=404, detail="Resource not found")

    await http_exception_handler(mock_request, exc)

    mock_logger.warning.assert_called_once_with("HTTP Exception: 404 - Resource not found for GET /test")
    mock_json_response.assert_called_once_with(
        status_code=404,
        content={"success": False, "code": "NOT_FOUND", "data": None, "message": "Resource not found"},
        headers=None,
    )


@pytest.mark.asyncio
async def test_http_exception_handler_with_coded_detail(mock_request, mock_logger, mock_json_response):
    exc = StarletteHTTPException(
        status_code=403,
        detail={"code": "AUTH_CLINIC_ACCESS_DENIED", "message": "You do not have access to this clinic"},
    )

    await http_exception_handler(mock_request, exc)

    content = mock_json_response.call_args.kwargs["content"]
    assert content["code"] == "AUTH_CLINIC_ACCESS_DENIED"
    assert content["message"] == "You do not have access to this clinic"


@pytest.mark.asyncio
async def test_validation_exception_handler(mock_logger, mock_json_response):
    mock_request = MagicMock(spec=Request)
    mock_request.method = "POST"
    mock_request.url.path = "/api/patients/"

    validation_errors = [
        {"loc": ["body", "full_name"], "msg": "field required", "type": "missing"},
        {"loc": ["body", "email"], "msg": "value is not a valid email address", "type": "value_error"}
    ]
    exc = RequestValidationError(errors=validation_errors)

    await validation_exception_handler(mock_request, exc)

    mock_logger.warning.assert_called_once()
    mock_json_response.assert_called_once_with(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "code": "VALIDATION_ERROR",
            "data": None,
            "message": "Validation failed",
            "details": {
                "errors": [
                    "Field 'body.full_name': field required",
                    "Field 'body.email': value is not a valid email address"
                ]
            }
        }
    )


@pytest.mark.asyncio
async def test_general_exception_handler(mock_logger, mock_traceback, mock_json_response):
    mock_request = MagicMock(spec=Request)
    mock_request.method = "GET"
    mock_request.url.path = "/internal"

    exc = ValueError("Something went wrong internally")

    await general_exception_handler(mock_request, exc)

    mock_logger.error.assert_called_once()
    mock_json_response.assert_called_once_with(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "code": "INTERNAL_ERROR",
            "data": None,
            "message": "An unexpected internal server error occurred.",
        }
    )


def test_register_global_exception_handlers(mock_fastapi_app):
    register_global_exception_handlers(mock_fastapi_app)

    assert mock_fastapi_app.exception_handler.call_count == 4
    mock_fastapi_app.exception_handler.assert_any_call(ServiceError)
    mock_fastapi_app.exception_handler.assert_any_call(StarletteHTTPException)
    mock_fastapi_app.exception_handler.assert_any_call(RequestValidationError)
    mock_fastapi_app.exception_handler.assert_any_call(Exception)
