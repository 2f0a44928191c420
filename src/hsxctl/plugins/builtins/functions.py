"""Built-in ``run async`` functions.

Every function takes the RuntimeContext first.  ``update`` is how a
script changes a reactive variable after render.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pluggy
import structlog

if TYPE_CHECKING:
    from hsxctl.services.context import RuntimeContext

hookimpl = pluggy.HookimplMarker("hsxctl")

log = structlog.get_logger(__name__)


async def sleep(ctx: RuntimeContext, seconds: float = 0) -> None:
    await asyncio.sleep(float(seconds))


def log_message(ctx: RuntimeContext, *parts: Any) -> str:
    message = " ".join(str(p) for p in parts)
    log.info("hsx.log", message=message)
    return message


def update(ctx: RuntimeContext, name: str, value: Any) -> None:
    """Set *name*; reactive variables notify their subscribers."""
    variable = ctx.state.reactive(name)
    if variable is not None:
        variable.set(value)
    else:
        ctx.state.set_variable(name, value)


class FunctionsPlugin:
    @hookimpl
    def register_async_functions(self) -> dict[str, Callable[..., Any]]:
        return {"sleep": sleep, "log": log_message, "update": update}
