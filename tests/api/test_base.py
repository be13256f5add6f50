"""Tests for the response envelope."""

from api.base import APIResponse, ErrorCodes, error_response, success_response


class TestSuccessResponse:

    def test_wraps_data(self):
        response = success_response({"id": 1})

        assert response.success is True
        assert response.data == {"id": 1}
        assert response.error is None

    def test_uses_given_request_id(self):
        assert success_response([], "req-1").meta.request_id == "req-1"

    def test_generates_request_id_when_missing(self):
        assert success_response([]).meta.request_id

    def test_timestamp_is_utc(self):
        assert success_response(None).meta.timestamp.tzinfo is not None


class TestErrorResponse:

    def test_wraps_error(self):
        response = error_response(ErrorCodes.CONFLICT, "Issue could not be updated", "req-2")

        assert response.success is False
        assert response.data is None
        assert response.error.code == "CONFLICT"
        assert response.error.message == "Issue could not be updated"
        assert response.meta.request_id == "req-2"

    def test_json_shape(self):
        dumped = error_response(ErrorCodes.NOT_FOUND, "Issue not found").model_dump(mode="json")

        assert set(dumped) == {"success", "data", "error", "meta"}
        assert set(dumped["meta"]) == {"timestamp", "request_id"}
        assert APIResponse.model_validate(dumped).error.code == "NOT_FOUND"
