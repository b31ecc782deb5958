"""Tests for tl_common.errors and tl_common.response."""

from src.tl_common.errors import (
    AppError,
    InternalError,
    InvalidPriceError,
    InvalidSettingsError,
    MissingTargetPriceError,
)
from src.tl_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=3001, message="x"), Exception)


class TestSpecificErrors:
    def test_invalid_settings(self) -> None:
        err = InvalidSettingsError("tick_size must be positive")
        assert err.code == 3001
        assert err.http_status == 422
        assert "tick_size" in err.message

    def test_invalid_price(self) -> None:
        err = InvalidPriceError(-5)
        assert err.code == 4001
        assert "-5" in err.message

    def test_missing_target_price(self) -> None:
        err = MissingTargetPriceError("CANCEL_ONE")
        assert err.code == 6001
        assert "CANCEL_ONE" in err.message

    def test_internal(self) -> None:
        assert InternalError().http_status == 500


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"armed": True})
        assert isinstance(resp, ApiResponse)
        assert resp.code == 0
        assert resp.data == {"armed": True}
        assert resp.request_id.startswith("req_")

    def test_success_keeps_request_id(self) -> None:
        assert success_response(None, "req_abc").request_id == "req_abc"

    def test_error(self) -> None:
        resp = error_response(4001, "bad price")
        assert resp.code == 4001
        assert resp.data is None
