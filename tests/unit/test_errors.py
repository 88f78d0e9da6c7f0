"""Tests for cs_common.errors and cs_common.response."""

from src.cs_common.errors import (
    AppError,
    CacheUnavailableError,
    ConflictError,
    CustomerExistsError,
    CustomerNotFoundError,
    DependencyError,
    MissingFieldError,
    NoFieldsToUpdateError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from src.cs_common.response import error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestCategories:
    def test_missing_single_field(self) -> None:
        err = MissingFieldError("tenant_id")
        assert isinstance(err, ValidationError)
        assert err.code == 1001
        assert err.http_status == 400
        assert err.message == "tenant_id is required"

    def test_missing_several_fields(self) -> None:
        err = MissingFieldError("tenant_id", "email", "password")
        assert err.message == "tenant_id, email, password are required"

    def test_no_fields_to_update(self) -> None:
        err = NoFieldsToUpdateError()
        assert isinstance(err, ValidationError)
        assert err.code == 1002

    def test_not_found(self) -> None:
        err = CustomerNotFoundError("abc")
        assert isinstance(err, NotFoundError)
        assert err.http_status == 404
        assert "abc" in err.message

    def test_conflict(self) -> None:
        err = CustomerExistsError()
        assert isinstance(err, ConflictError)
        assert err.http_status == 409

    def test_dependencies(self) -> None:
        assert isinstance(StoreUnavailableError(), DependencyError)
        assert isinstance(CacheUnavailableError(), DependencyError)
        assert StoreUnavailableError().http_status == 503


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "abc"}

    def test_error(self) -> None:
        resp = error_response(2002, "Customer already exists")
        assert resp.code == 2002
        assert resp.data is None

    def test_serialization(self) -> None:
        d = success_response({"total": 1}).model_dump()
        assert set(d) == {"code", "message", "data", "timestamp", "request_id"}
