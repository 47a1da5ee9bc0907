import logging

from smartration.runtime.logging import LOGGER_NAMESPACE, get_logger, parse_log_level, set_log_level


def test_parse_log_level_names() -> None:
    assert parse_log_level("debug") == logging.DEBUG
    assert parse_log_level(" Warn ") == logging.WARNING
    assert parse_log_level("ERROR") == logging.ERROR
    assert parse_log_level("") == logging.INFO
    assert parse_log_level(None) == logging.INFO
    assert parse_log_level("chatty", default=logging.WARNING) == logging.WARNING


def test_get_logger_nests_under_package_namespace() -> None:
    assert get_logger("smartration.receipt.ocr_helpers").name == "smartration.receipt.ocr_helpers"
    assert get_logger("plugins.extra").name == "smartration.plugins.extra"
    assert get_logger(LOGGER_NAMESPACE).name == LOGGER_NAMESPACE


def test_set_log_level_updates_package_logger() -> None:
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    previous = package_logger.level
    try:
        set_log_level(logging.DEBUG)

        assert package_logger.level == logging.DEBUG
        assert all("%(lineno)d" in handler.formatter._fmt for handler in package_logger.handlers)
    finally:
        set_log_level(previous or logging.INFO)
