"""Tests for logging helpers."""

import io
import logging

import pytest

from recipe_filter_engine.logging import disable, enable, get_logger, set_level, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    root = logging.getLogger("recipe_filter_engine")
    yield
    enable()
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


class TestLogging:
    def test_get_logger_prefixes_name(self) -> None:
        assert get_logger("runner").name == "recipe_filter_engine.runner"
        assert get_logger("recipe_filter_engine.engine").name == "recipe_filter_engine.engine"

    def test_setup_logging_writes_to_stream(self) -> None:
        stream = io.StringIO()
        setup_logging("DEBUG", format="%(name)s %(message)s", stream=stream)

        get_logger("runner").debug("hello")

        assert stream.getvalue() == "recipe_filter_engine.runner hello\n"

    def test_set_level_filters(self) -> None:
        stream = io.StringIO()
        setup_logging("DEBUG", stream=stream)
        set_level("WARNING")

        get_logger("runner").info("quiet")

        assert stream.getvalue() == ""

    def test_disable_and_enable(self) -> None:
        stream = io.StringIO()
        setup_logging("INFO", format="%(message)s", stream=stream)

        disable()
        get_logger("engine").info("dropped")
        enable()
        get_logger("engine").info("kept")

        assert stream.getvalue() == "kept\n"

    def test_setup_logging_replaces_handlers_and_writes_file(self, tmp_path) -> None:
        log_file = tmp_path / "filter.log"
        setup_logging("INFO", stream=io.StringIO())
        setup_logging("INFO", format="%(message)s", stream=io.StringIO(), file=str(log_file))

        get_logger("loaders").warning("to file")

        assert len(logging.getLogger("recipe_filter_engine").handlers) == 2
        assert log_file.read_text() == "to file\n"
