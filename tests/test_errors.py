import pytest

from daylog.errors import (
    DaylogError,
    ErrorCode,
    ErrorResponse,
    error_response,
    success_response,
)


def test_error_response_serializes_details():
    error = ErrorResponse(code="INVALID_DATE", message="Nope", details={"value": "x"})

    assert error.to_dict() == {
        "code": "INVALID_DATE",
        "message": "Nope",
        "details": {"value": "x"},
    }


def test_daylog_error_defaults_details():
    exc = DaylogError("LINE_NOT_FOUND", "Missing line")

    assert str(exc) == "Missing line"
    assert exc.error.to_dict() == {
        "code": "LINE_NOT_FOUND",
        "message": "Missing line",
        "details": {},
    }


def test_response_envelopes():
    error = ErrorResponse(code="GIT_ERROR", message="failed")

    assert success_response({"items": []}) == {"ok": True, "data": {"items": []}}
    assert error_response(error) == {
        "ok": False,
        "error": {"code": "GIT_ERROR", "message": "failed", "details": {}},
    }


def test_daylog_error_accepts_only_known_codes():
    exc = DaylogError(ErrorCode.GIT_ERROR, "failed", {"date": "2025-01-10"})

    assert exc.code is ErrorCode.GIT_ERROR
    assert exc.error.code == "GIT_ERROR"
    assert type(exc.error.code) is str

    with pytest.raises(ValueError):
        DaylogError("NOT_A_CODE", "failed")
