import asyncio

import pytest


def pytest_configure(config):
    # register custom markers
    config.addinivalue_line(
        "markers",
        "host_test: mark espchip tests that run on the host machine only "
        "(don't require a real chip connected).",
    )


def need_to_install_package_err():
    pytest.exit(
        "To run the tests, install espchip in development mode: "
        "pip install -e .[test]"
    )


def run(coro):
    """Drive a coroutine to completion from a plain test function"""
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def restore_log_verbosity():
    """Tests may change the logger verbosity or colors, reset them afterwards."""
    from espchip.logger import log

    yield
    log.set_verbosity("auto")
    log._set_smart_features()
