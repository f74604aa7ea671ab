"""Extension hooks run at fixed points of the build.

A hook is any object with a ``stage`` attribute and a ``run(value)`` method
returning the (possibly rewritten) value. Hooks for a stage run in
registration order; each receives the previous hook's result.

    class Shout:
        stage = HookStage.AFTER_PARSE

        def run(self, content):
            content.title = content.title.upper()
            return content
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from quire.exceptions import HookError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HookStage(str, Enum):
    BEFORE_PARSE = "before_parse"  # RawContent
    AFTER_PARSE = "after_parse"  # Content
    BEFORE_RENDER = "before_render"  # Content
    AFTER_RENDER = "after_render"  # (Content, html)


@runtime_checkable
class Hook(Protocol):
    stage: HookStage | str

    def run(self, value: Any) -> Any: ...


def hook_name(hook: Hook) -> str:
    return getattr(hook, "name", None) or type(hook).__name__


def _stage_of(hook: Hook) -> HookStage:
    try:
        return HookStage(hook.stage)
    except (AttributeError, ValueError) as exc:
        raise HookError(hook_name(hook), str(getattr(hook, "stage", None)), "unknown hook stage") from exc


def hooks_for(hooks: Iterable[Hook], stage: HookStage) -> list[Hook]:
    return [hook for hook in hooks if _stage_of(hook) == stage]


def run_hooks(hooks: Iterable[Hook], stage: HookStage, value: T) -> T:
    """Fold ``value`` through every hook registered for ``stage``.

    Raises:
        HookError: On the first failing hook. Later hooks do not run.

    """
    for hook in hooks_for(hooks, stage):
        name = hook_name(hook)
        try:
            value = hook.run(value)
        except HookError:
            raise
        except Exception as exc:
            raise HookError(name, stage.value, str(exc) or type(exc).__name__) from exc
        if value is None:
            raise HookError(name, stage.value, "hook returned None")
        logger.debug("Hook %s ran for %s", name, stage.value)
    return value
