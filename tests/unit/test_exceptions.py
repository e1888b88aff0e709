"""Tests for exception classes."""

import pytest

from table_manager.exceptions import ConfigurationError, StoreError, TableManagerError


class TestStoreError:
    """Tests for StoreError."""

    def test_message_with_table(self) -> None:
        error = StoreError("CreateTable", "LimitExceededException", table_name="cortex_1")

        assert str(error) == "CreateTable failed: LimitExceededException [table=cortex_1]"
        assert error.operation == "CreateTable"
        assert error.table_name == "cortex_1"

    def test_message_without_table(self) -> None:
        error = StoreError("ListTables", "AccessDeniedException")

        assert str(error) == "ListTables failed: AccessDeniedException"
        assert error.table_name is None

    def test_cause_kept(self) -> None:
        cause = RuntimeError("socket closed")

        error = StoreError("DescribeTable", "socket closed", cause=cause)

        assert error.cause is cause


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_message(self) -> None:
        error = ConfigurationError("poll_interval", "soon", "expected a duration")

        assert str(error) == "Invalid poll_interval 'soon': expected a duration"
        assert error.field == "poll_interval"
        assert error.value == "soon"
        assert error.reason == "expected a duration"


class TestHierarchy:
    """All package errors share one base class."""

    @pytest.mark.parametrize(
        "error",
        [
            StoreError("ListTables", "boom"),
            ConfigurationError("table_prefix", "", "cannot be empty"),
        ],
    )
    def test_catchable_as_base(self, error) -> None:
        with pytest.raises(TableManagerError):
            raise error
