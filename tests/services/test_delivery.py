"""Tests for delivery strategy selection and the share session."""

import re
from unittest.mock import AsyncMock

import pytest

from conftest import make_request
from sharecards.errors import DeliveryError, ShareCancelled
from sharecards.models.delivery import DeliveryMethod, DeviceProfile
from sharecards.models.share import ShareCardType
from sharecards.services.delivery import (
    DeliverySelector,
    DevicePolicy,
    FileDownloader,
    build_filename,
    plan_delivery,
)
from sharecards.services.prefetch import PrefetchController
from sharecards.services.share_session import ShareSession

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
DESKTOP = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 Chrome/131.0"


def capable_phone(**overrides) -> DeviceProfile:
    values = dict(user_agent=IPHONE, max_touch_points=5, has_share_api=True, can_share_files=True)
    values.update(overrides)
    return DeviceProfile(**values)


class TestDevicePolicy:
    @pytest.mark.parametrize("ua", [
        IPHONE,
        "Mozilla/5.0 (Linux; Android 14; Pixel 8)",
        "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)",
        "Opera/9.80 (J2ME/MIDP; Opera Mini/9.80)",
        "Mozilla/5.0 (compatible; MSIE 10.0; Windows Phone 8.0; IEMobile/10.0)",
    ])
    def test_mobile_user_agents(self, ua):
        assert DevicePolicy().is_mobile_user_agent(ua)

    def test_desktop_user_agent(self):
        assert not DevicePolicy().is_mobile_user_agent(DESKTOP)

    def test_capable_phone_shares_natively(self):
        assert DevicePolicy().can_native_share(capable_phone())

    @pytest.mark.parametrize("overrides", [
        {"max_touch_points": 0},
        {"user_agent": DESKTOP},
        {"has_share_api": False},
        {"can_share_files": False},
    ])
    def test_every_condition_required(self, overrides):
        assert not DevicePolicy().can_native_share(capable_phone(**overrides))

    def test_touch_events_count_as_touch(self):
        assert DevicePolicy().can_native_share(capable_phone(max_touch_points=0, has_touch_events=True))


class TestFilename:
    def test_format(self):
        assert build_filename(ShareCardType.TOP_CHARTS, 1700000000123) == "myscrobble-top-charts-1700000000123.png"

    def test_defaults_to_now(self):
        assert re.fullmatch(r"myscrobble-history-\d{13}\.png", build_filename(ShareCardType.HISTORY))


class TestPlanDelivery:
    def test_native_plan_carries_caption(self):
        plan = plan_delivery(capable_phone(), ShareCardType.CONCERTS)
        assert plan.method == DeliveryMethod.NATIVE_SHARE
        assert plan.caption == "Check out my music on MyScrobble.fm"
        assert plan.filename.startswith("myscrobble-concerts-")

    def test_desktop_plan_downloads(self):
        plan = plan_delivery(DeviceProfile(user_agent=DESKTOP), ShareCardType.CONCERTS)
        assert plan.method == DeliveryMethod.DOWNLOAD
        assert plan.caption is None


class TestDeliverySelector:
    def _selector(self, profile, share_sheet=None):
        downloader = AsyncMock()
        selector = DeliverySelector(profile, downloader, share_sheet=share_sheet, clock=lambda: 1700000000.5)
        return selector, downloader

    @pytest.mark.asyncio
    async def test_native_share(self):
        sheet = AsyncMock()
        selector, downloader = self._selector(capable_phone(), sheet)

        result = await selector.deliver(b"png", ShareCardType.DASHBOARD)

        assert result.method == DeliveryMethod.NATIVE_SHARE
        assert result.filename == "myscrobble-dashboard-1700000000500.png"
        sheet.share.assert_awaited_once_with(b"png", result.filename, "Check out my music on MyScrobble.fm")
        downloader.download.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_desktop_downloads(self):
        sheet = AsyncMock()
        selector, downloader = self._selector(DeviceProfile(user_agent=DESKTOP), sheet)

        result = await selector.deliver(b"png", ShareCardType.DASHBOARD)

        assert result.method == DeliveryMethod.DOWNLOAD
        assert not result.fell_back
        sheet.share.assert_not_awaited()
        downloader.download.assert_awaited_once_with(b"png", result.filename)

    @pytest.mark.asyncio
    async def test_no_share_sheet_downloads(self):
        selector, downloader = self._selector(capable_phone())
        result = await selector.deliver(b"png", ShareCardType.PODCASTS)
        assert result.method == DeliveryMethod.DOWNLOAD
        downloader.download.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_share_failure_falls_back(self):
        sheet = AsyncMock()
        sheet.share.side_effect = RuntimeError("NotAllowedError")
        selector, downloader = self._selector(capable_phone(), sheet)

        result = await selector.deliver(b"png", ShareCardType.HISTORY)

        assert result.method == DeliveryMethod.DOWNLOAD
        assert result.fell_back
        downloader.download.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_does_not_download(self):
        sheet = AsyncMock()
        sheet.share.side_effect = ShareCancelled("AbortError")
        selector, downloader = self._selector(capable_phone(), sheet)

        result = await selector.deliver(b"png", ShareCardType.HISTORY)

        assert result.cancelled
        assert result.method == DeliveryMethod.NATIVE_SHARE
        downloader.download.assert_not_awaited()


class TestFileDownloader:
    @pytest.mark.asyncio
    async def test_writes_file(self, tmp_path):
        downloader = FileDownloader(tmp_path / "out")
        await downloader.download(b"png-bytes", "card.png")
        assert (tmp_path / "out" / "card.png").read_bytes() == b"png-bytes"

    @pytest.mark.asyncio
    async def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(DeliveryError):
            await FileDownloader(blocker).download(b"png", "card.png")


class TestShareSession:
    def _session(self, generate, tmp_path):
        controller = PrefetchController(generate, timeout=5)
        selector = DeliverySelector(DeviceProfile(user_agent=DESKTOP), FileDownloader(tmp_path))
        return ShareSession(controller, selector)

    @pytest.mark.asyncio
    async def test_open_then_share_downloads(self, tmp_path):
        generate = AsyncMock(return_value=b"\x89PNG fake")
        session = self._session(generate, tmp_path)

        session.open(make_request("podcasts"))
        outcome = await session.share()

        assert outcome.ok
        assert outcome.result.method == DeliveryMethod.DOWNLOAD
        assert (tmp_path / outcome.result.filename).read_bytes() == b"\x89PNG fake"
        generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_generation_failure_becomes_retry_message(self, tmp_path):
        generate = AsyncMock(side_effect=RuntimeError("boom"))
        session = self._session(generate, tmp_path)

        session.open(make_request("podcasts", locale="pt-BR"))
        outcome = await session.share()

        assert not outcome.ok
        assert outcome.message == "Falha ao gerar a imagem, tente novamente"

    @pytest.mark.asyncio
    async def test_share_requires_open_panel(self, tmp_path):
        session = self._session(AsyncMock(), tmp_path)
        with pytest.raises(RuntimeError):
            await session.share()
