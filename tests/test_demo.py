import logging

import pytest

from tag_search import demo
from tag_search.util.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers bound to captured streams once the test finishes."""
    yield
    logger = logging.getLogger("tag_search")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def test_demo_prints_a_result_per_metric(capsys):
    demo.main()

    output = capsys.readouterr().out
    assert "Using Euclidean distance, this picture is most similar to: Forest" in output
    assert "Using Manhattan distance, this picture is most similar to: Forest" in output
    assert "Using Chebyshev distance, this picture is most similar to: Forest" in output
    assert "No match found using Mahalanobis distance." in output
    assert "Euclidean distance computation time:" in output


def test_setup_logging_installs_one_handler():
    logger = setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)

    assert logger.name == "tag_search"
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
