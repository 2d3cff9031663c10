from datetime import datetime, timedelta

import pytest

from geimeribot.commands.countdown import CountdownCommand, parse_target
from geimeribot.services.countdown_service import (
    COUNTDOWN_KEY,
    CountdownService,
    render_countdown,
)
from geimeribot.services.interactions import CommandInteraction
from geimeribot.storage.models import CountdownRecord

NOW = datetime(2026, 12, 1, 12, 0)


class FakeNickname:
    def __init__(self):
        self.nicks = []
        self.fail = False

    async def set_nickname(self, nick):
        if self.fail:
            return False
        self.nicks.append(nick)
        return True


@pytest.fixture
def nickname():
    return FakeNickname()


@pytest.fixture
def service(store, cache, nickname):
    return CountdownService(store=store, cache=cache, sink=nickname)


def record_in(delta, description="Joulu"):
    return CountdownRecord(target_date=NOW + delta, description=description)


def test_render_days_hours_minutes():
    assert render_countdown(NOW, record_in(timedelta(days=1, hours=2, minutes=3))) == "01:02:03 Joulu"


def test_render_truncates_long_label():
    text = render_countdown(NOW, record_in(timedelta(days=1, hours=2, minutes=3), "Pikkujoulut ja muut juhlat kotona"))

    assert len(text) == 32
    assert text == "01:02:03 Pikkujoulut ja muut ..."


def test_render_label_that_just_fits():
    label = "x" * 23
    assert render_countdown(NOW, record_in(timedelta(minutes=5), label)) == "00:00:05 " + label


def test_render_past_target_shows_zero():
    assert render_countdown(NOW, record_in(timedelta(hours=-3))) == "00:00:00 Joulu"


@pytest.mark.asyncio
async def test_nickname_pushed_only_when_changed(service, nickname):
    service.set_countdown(record_in(timedelta(days=2, seconds=90)))

    assert await service.update_nickname(NOW) is True
    assert await service.update_nickname(NOW + timedelta(seconds=30)) is False
    assert await service.update_nickname(NOW + timedelta(minutes=1)) is True

    assert nickname.nicks == ["02:00:01 Joulu", "02:00:00 Joulu"]


@pytest.mark.asyncio
async def test_failed_push_is_retried(service, nickname):
    service.set_countdown(record_in(timedelta(days=2)))
    nickname.fail = True
    assert await service.update_nickname(NOW) is False

    nickname.fail = False
    assert await service.update_nickname(NOW) is True
    assert nickname.nicks == ["02:00:00 Joulu"]


@pytest.mark.asyncio
async def test_expired_countdown_is_removed_after_a_day(service, nickname, store):
    service.set_countdown(record_in(timedelta(hours=-23)))
    await service.update_nickname(NOW)
    assert nickname.nicks == ["00:00:00 Joulu"]

    await service.update_nickname(NOW + timedelta(hours=1))

    assert nickname.nicks == ["00:00:00 Joulu", None]
    assert store.get(COUNTDOWN_KEY) is None
    assert await service.update_nickname(NOW + timedelta(hours=2)) is False


@pytest.mark.asyncio
async def test_no_countdown_does_nothing(service, nickname):
    assert await service.update_nickname(NOW) is False
    assert nickname.nicks == []


@pytest.mark.asyncio
async def test_countdown_read_from_store_is_cached(service, store, monotonic):
    store.put(COUNTDOWN_KEY, record_in(timedelta(days=1)).to_dict())
    assert service.get_countdown().description == "Joulu"

    store.put(COUNTDOWN_KEY, record_in(timedelta(days=1), "Uusi").to_dict())
    assert service.get_countdown().description == "Joulu"

    monotonic.advance(301)
    assert service.get_countdown().description == "Uusi"


def test_parse_target_local_time():
    # Helsinki is UTC+2 in December
    assert parse_target("2026-12-24 18:00", "Europe/Helsinki") == datetime(2026, 12, 24, 16, 0)
    assert parse_target("2026-12-24", "Europe/Helsinki") == datetime(2026, 12, 23, 22, 0)
    assert parse_target("2026-12-24T18:00:00+00:00", "Europe/Helsinki") == datetime(2026, 12, 24, 18, 0)
    assert parse_target("jouluaatto", "Europe/Helsinki") is None


@pytest.mark.asyncio
async def test_countdown_command(service, store):
    command = CountdownCommand(service)

    response = await command.execute(CommandInteraction(
        id="1", name="countdown", user_name="matti",
        options={"target": "2026-12-24 18:00", "description": "Joulu"},
    ))

    assert response["type"] == 4
    assert response["data"]["content"] == "Countdown asetettu: **Joulu** -> 24.12.2026 klo 18.00"
    assert store.get(COUNTDOWN_KEY) == {"target_date": "2026-12-24T16:00:00", "description": "Joulu"}


@pytest.mark.asyncio
async def test_countdown_command_validation(service):
    command = CountdownCommand(service)

    missing = await command.execute(CommandInteraction(id="1", name="countdown", user_name="m", options={"target": "2026-12-24"}))
    invalid = await command.execute(CommandInteraction(
        id="2", name="countdown", user_name="m", options={"target": "huomenna", "description": "x"},
    ))

    assert missing["data"]["content"] == "Missing target or description."
    assert invalid["data"]["content"] == "Invalid date format. Use YYYY-MM-DD HH:mm."


@pytest.mark.asyncio
async def test_failed_reset_keeps_expired_countdown(service, nickname, store):
    service.set_countdown(record_in(timedelta(days=-2)))
    nickname.fail = True

    assert await service.update_nickname(NOW) is False
    assert store.get(COUNTDOWN_KEY) is not None

    nickname.fail = False
    assert await service.update_nickname(NOW + timedelta(minutes=1)) is True
    assert nickname.nicks == [None]
    assert store.get(COUNTDOWN_KEY) is None
