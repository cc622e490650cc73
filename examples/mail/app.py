"""Mail — nested routes, default routes, and a leave guard.

A three-level mail client:

    /folder/{folder}                 folder (default child: list)
    /folder/{folder}/list            the folder's message list
    /folder/{folder}/message/{id:int}  one message
    /compose                         compose a draft; leaving asks first

The compose screen refuses to be left while the draft has unsaved text,
unless the user confirms discarding it.

Run:
    cd examples/mail && python app.py
"""

import logging

import anyio

from trellis import LeaveEvent, MemoryHistory, Route, RouteEvent, Router

logger = logging.getLogger("mail")

router = Router()

# ---------------------------------------------------------------------------
# Screen state
# ---------------------------------------------------------------------------

screen: list[str] = []
draft: dict[str, str] = {"body": ""}
confirm_discard: dict[str, bool] = {"answer": False}


def show(name: str):
    def _enter(event: RouteEvent) -> None:
        screen.append(f"{name} {event.parameters}" if event.parameters else name)
        logger.info("enter %s %s", name, event.parameters)

    return _enter


async def _ask_discard() -> bool:
    # Stands in for a modal dialog
    await anyio.sleep(0)
    return confirm_discard["answer"]


def guard_draft(event: LeaveEvent) -> None:
    if draft["body"]:
        event.allow_leave(_ask_discard())


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def folder_routes(route: Route) -> None:
    route.add_route("list", "/list", default=True, enter=show("list"))
    route.add_route("message", "/message/{id:int}", enter=show("message"))


router.add_route("folder", "/folder/{folder}", enter=show("folder"), mount=folder_routes)
router.add_route("compose", "/compose", enter=show("compose"), leave=guard_draft)


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    history = MemoryHistory("/folder/inbox")
    async with anyio.create_task_group() as tg:
        await tg.start(router.bind, history)
        await router.navigate("folder.message", {"id": 7})
        print("at", history.current_address())

        await router.navigate("compose")
        draft["body"] = "Dear..."
        allowed = await router.navigate("folder", {"folder": "sent"})
        print("left draft:", allowed, "at", history.current_address())

        confirm_discard["answer"] = True
        allowed = await router.navigate("folder", {"folder": "sent"})
        print("left draft:", allowed, "at", history.current_address())
        tg.cancel_scope.cancel()


if __name__ == "__main__":
    anyio.run(main)
