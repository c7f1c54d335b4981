import pytest

from sceneloom.objects import Box


@pytest.fixture
def box() -> Box:
    return Box("white", 0.0, 0.0, 10.0, 10.0)
