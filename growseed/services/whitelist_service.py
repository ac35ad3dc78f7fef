"""
Whitelist management with best-effort backend mirroring.

Local edits always stand. When a session exists the new whitelist is pushed;
a failed push is logged and does not undo the edit.
"""

from growseed.infrastructure.observability.logging import get_logger
from growseed.services.errors import GrowseedError
from growseed.services.state_store import StateStore, load_whitelist, save_whitelist
from growseed.services.sync_orchestrator import SyncOrchestrator
from growseed.services.whitelist_matcher import add_entry, remove_entry

logger = get_logger(__name__)


async def _mirror(orchestrator: SyncOrchestrator | None, whitelist: list[str]) -> bool:
    if orchestrator is None or not await orchestrator.is_authenticated():
        return False
    try:
        await orchestrator.push_whitelist(whitelist)
        return True
    except GrowseedError as e:
        logger.warning("Failed to push whitelist to backend", error=e.message)
        return False


async def add_to_whitelist(
    store: StateStore, raw_entry: str, orchestrator: SyncOrchestrator | None = None
) -> tuple[list[str], bool]:
    """Add an entry; duplicates and blanks are ignored. Returns (whitelist, added)."""
    whitelist, added = add_entry(await load_whitelist(store), raw_entry)
    if added:
        await save_whitelist(store, whitelist)
        logger.info("Whitelist entry added", entry=whitelist[-1], size=len(whitelist))
        await _mirror(orchestrator, whitelist)
    return whitelist, added


async def remove_from_whitelist(
    store: StateStore, entry: str, orchestrator: SyncOrchestrator | None = None
) -> tuple[list[str], bool]:
    whitelist, removed = remove_entry(await load_whitelist(store), entry)
    if removed:
        await save_whitelist(store, whitelist)
        logger.info("Whitelist entry removed", entry=entry, size=len(whitelist))
        await _mirror(orchestrator, whitelist)
    return whitelist, removed
