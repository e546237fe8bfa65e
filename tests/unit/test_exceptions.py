"""Unit tests for custom exception hierarchy"""
import pytest
import httpx
import pybreaker
from datetime import datetime
from mission_engine.exceptions import (
    MissionEngineError,
    ValidationError,
    ExternalAPIError,
    MissionGenerationError,
    GenerationTimeoutError,
    CircuitBreakerOpenError,
    StorageError,
    wrap_external_exception
)


class TestMissionEngineError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = MissionEngineError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = MissionEngineError(
            "Save failed",
            user_id="123",
            operation="save_state",
            context={"path": "data/123"},
        )
        assert error.user_id == "123"
        assert error.operation == "save_state"
        assert error.context == {"path": "data/123"}

    def test_is_logged_on_creation(self, caplog):
        MissionEngineError("Logged error")
        assert "Logged error" in caplog.text


class TestSubclasses:

    def test_validation_error(self):
        error = ValidationError("Reward must be non-negative", field="reward", value=-5)
        assert error.field == "reward"
        assert error.context == {"field": "reward", "value": -5}
        assert "reward" in error.user_message

    def test_generation_errors_share_user_notice(self):
        notice = "Failed to generate mission. Please try again later."
        assert MissionGenerationError("boom").user_message == notice
        assert GenerationTimeoutError(5).user_message == notice

    def test_generation_timeout_message(self):
        error = GenerationTimeoutError(20)
        assert isinstance(error, MissionGenerationError)
        assert isinstance(error, ExternalAPIError)
        assert "20.0s" in error.message

    def test_storage_error(self):
        error = StorageError("disk full", path="/tmp/x.json")
        assert error.path == "/tmp/x.json"
        assert isinstance(error, MissionEngineError)


class TestWrapExternalException:

    def test_passthrough(self):
        original = ValidationError("bad")
        assert wrap_external_exception(original, operation="op") is original

    def test_circuit_breaker(self):
        wrapped = wrap_external_exception(pybreaker.CircuitBreakerError("open"), operation="op")
        assert isinstance(wrapped, CircuitBreakerOpenError)

    def test_http_timeout(self):
        wrapped = wrap_external_exception(httpx.ReadTimeout("slow"), operation="op")
        assert isinstance(wrapped, MissionGenerationError)

    def test_http_status(self):
        request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
        response = httpx.Response(503, request=request)
        error = httpx.HTTPStatusError("unavailable", request=request, response=response)

        wrapped = wrap_external_exception(error, operation="op")

        assert isinstance(wrapped, MissionGenerationError)
        assert wrapped.status_code == 503

    @pytest.mark.parametrize("error", [ValueError("x"), KeyError("choices"), TypeError("y")])
    def test_malformed_content(self, error):
        assert isinstance(wrap_external_exception(error, operation="op"), MissionGenerationError)

    def test_generic_fallback(self):
        wrapped = wrap_external_exception(RuntimeError("???"), operation="op")
        assert type(wrapped) is MissionEngineError
        assert wrapped.operation == "op"
