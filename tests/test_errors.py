"""Tests for core/errors.py - error taxonomy and CLI error handling."""

import pytest
from botocore.exceptions import EndpointConnectionError
from cloudherd.core.errors import (
    CloudHerdError,
    ConfigurationError,
    ConvergenceTimeout,
    ExitCode,
    InvalidInput,
    PreconditionViolation,
    ProviderError,
    TransientProviderError,
    format_error_message,
    main_with_error_handling,
    require,
)
from factories import client_error


class TestErrorClasses:
    def test_exit_codes(self):
        assert ConfigurationError("x").exit_code == ExitCode.CONFIG_ERROR
        assert ProviderError("x").exit_code == ExitCode.PROVIDER_ERROR
        assert TransientProviderError("x").exit_code == ExitCode.PROVIDER_ERROR
        assert InvalidInput("x").exit_code == ExitCode.INVALID_INPUT
        assert ConvergenceTimeout("x", timeout=1).exit_code == ExitCode.TIMEOUT
        assert PreconditionViolation("x").exit_code == ExitCode.PRECONDITION_FAILED

    def test_all_derive_from_base(self):
        for cls in (ConfigurationError, ProviderError, InvalidInput, PreconditionViolation):
            assert issubclass(cls, CloudHerdError)
        assert issubclass(TransientProviderError, ProviderError)

    def test_convergence_timeout_details(self):
        error = ConvergenceTimeout("slow", timeout=60.0, label="stopped", details={"id": "i-1"})

        assert error.timeout == 60.0
        assert error.label == "stopped"
        assert error.details == {"timeout": 60.0, "label": "stopped", "id": "i-1"}

    def test_format_error_message(self):
        error = PreconditionViolation("no zone", {"domain": "example.com"})

        assert format_error_message(error) == "no zone (domain=example.com)"


class TestRequire:
    def test_returns_stripped_value(self):
        assert require("  i-1 ", "instance id") == "i-1"

    @pytest.mark.parametrize("value", [None, "", "  \t"])
    def test_blank_is_invalid(self, value):
        with pytest.raises(InvalidInput) as exc_info:
            require(value, "DNS name")

        assert exc_info.value.details == {"field": "DNS name"}


class TestMainWithErrorHandling:
    def test_success_passthrough(self):
        @main_with_error_handling()
        def command() -> int:
            return 0

        assert command() == 0

    def test_cloudherd_error_maps_to_exit_code(self):
        @main_with_error_handling()
        def command() -> int:
            raise ConvergenceTimeout("could not stop instance", timeout=540)

        assert command() == ExitCode.TIMEOUT

    @pytest.mark.parametrize(
        "error", [client_error("UnauthorizedOperation"), EndpointConnectionError(endpoint_url="x")]
    )
    def test_botocore_errors_map_to_provider_error(self, error):
        @main_with_error_handling()
        def command() -> int:
            raise error

        assert command() == ExitCode.PROVIDER_ERROR

    def test_keyboard_interrupt(self):
        @main_with_error_handling()
        def command() -> int:
            raise KeyboardInterrupt

        assert command() == 130

    def test_unexpected_error(self):
        @main_with_error_handling(log_errors=False)
        def command() -> int:
            raise RuntimeError("boom")

        assert command() == ExitCode.UNKNOWN_ERROR
