import pytest

from module.sonic_player.utils import decorators
from module.sonic_player.utils.decorators import cooldown, log_operation


class Clicker:
    def __init__(self):
        self.clicks = 0

    @cooldown(seconds=1.0)
    async def click(self):
        self.clicks += 1
        return self.clicks


@pytest.mark.anyio
async def test_cooldown_is_per_instance(monkeypatch):
    now = [10.0]
    monkeypatch.setattr(decorators.time, "monotonic", lambda: now[0])
    first, second = Clicker(), Clicker()

    assert await first.click() == 1
    assert await first.click() is None
    assert await second.click() == 1

    now[0] += 1.5
    assert await first.click() == 2


@pytest.mark.anyio
async def test_log_operation_reraises():
    @log_operation("failing")
    async def failing():
        raise ValueError("nope")

    @log_operation()
    async def working(x):
        return x * 2

    assert await working(21) == 42
    with pytest.raises(ValueError):
        await failing()
