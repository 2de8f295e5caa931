import io
import logging

import pytest

from license_compliance.log import configure_logging


@pytest.mark.parametrize("verbosity, level", [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)])
def test_verbosity_levels(verbosity, level):
    configure_logging(verbosity, stream=io.StringIO())
    assert logging.getLogger("license_compliance").level == level


def test_format_and_single_handler():
    stream = io.StringIO()
    configure_logging(0, stream=stream)
    configure_logging(0, stream=stream)
    logger = logging.getLogger("license_compliance.scanner")
    logger.info("hidden")
    logger.warning("lib-a has an empty version")

    assert len(logging.getLogger("license_compliance").handlers) == 1
    assert stream.getvalue() == "WARNING | license_compliance.scanner | lib-a has an empty version\n"
