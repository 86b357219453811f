import logging

import pytest

from mensura.common import F, asF, getLogger
from mensura.rhythm import logger


def test_as_fraction():
    assert asF(3) == F(3)
    assert asF("3/8") == F(3, 8)
    assert asF(F(1, 4)) == F(1, 4)
    with pytest.raises(TypeError):
        asF(0.5)


def test_package_logger():
    assert logger.name == "mensura.rhythm"
    assert not logger.propagate
    assert len(logger.handlers) == 1
    assert getLogger("mensura.rhythm") is logger
    assert logger.level == logging.WARNING
