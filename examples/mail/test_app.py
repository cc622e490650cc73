"""Tests for the mail example — defaults, nested params, leave guard."""

import anyio
import pytest

from trellis import MemoryHistory


class TestFolders:
    @pytest.mark.anyio
    async def test_folder_enters_default_list(self, example_module, example_router) -> None:
        assert await example_router.dispatch("/folder/inbox") is True
        assert example_router.active_names == ("folder", "list")
        assert example_module.screen == ["folder {'folder': 'inbox'}", "list"]

    @pytest.mark.anyio
    async def test_message_keeps_folder(self, example_module, example_router) -> None:
        await example_router.dispatch("/folder/archive")
        example_module.screen.clear()
        start = example_router.get_route("folder")

        assert example_router.url_for("message", {"id": 3}, start=start) == (
            "/folder/archive/message/3"
        )
        assert await example_router.navigate("message", {"id": 3}, start=start) is True
        assert example_module.screen == ["message {'id': 3}"]


class TestBinding:
    @pytest.mark.anyio
    async def test_links_and_back_button(self, example_router) -> None:
        history = MemoryHistory("/folder/inbox")

        async with anyio.create_task_group() as tg:
            await tg.start(example_router.bind, history)

            history.click("/folder/inbox/message/9")
            await anyio.wait_all_tasks_blocked()
            assert example_router.active_names == ("folder", "message")

            history.back()
            await anyio.wait_all_tasks_blocked()
            assert example_router.active_names == ("folder", "list")
            tg.cancel_scope.cancel()


class TestDraftGuard:
    @pytest.mark.anyio
    async def test_empty_draft_leaves_freely(self, example_router) -> None:
        await example_router.dispatch("/compose")
        assert await example_router.dispatch("/folder/inbox") is True

    @pytest.mark.anyio
    async def test_unsaved_draft_blocks(self, example_module, example_router) -> None:
        await example_router.dispatch("/compose")
        example_module.draft["body"] = "Dear..."

        assert await example_router.dispatch("/folder/inbox") is False
        assert example_router.active_names == ("compose",)

    @pytest.mark.anyio
    async def test_confirmed_discard_leaves(self, example_module, example_router) -> None:
        await example_router.dispatch("/compose")
        example_module.draft["body"] = "Dear..."
        example_module.confirm_discard["answer"] = True

        assert await example_router.dispatch("/folder/inbox") is True
        assert example_router.active_names == ("folder", "list")
