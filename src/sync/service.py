import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Dict, Iterable, List, Optional, Protocol, Set, Type, TypeVar

from config.models import CustomCommand
from .errors import (
    PersistenceWriteFailed,
    RegisteredStateUnavailable,
    RemoteDeletionFailed,
    RemoteListingFailed,
    RemoteRegistrationFailed,
    SyncError,
)
from .reconciler import LiveCommand, SyncPlan, reconcile

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RegisteredCommandStore(Protocol):
    async def load_registered(self) -> Set[str]: ...

    async def save_registered(self, names: Iterable[str]) -> None: ...


class RemoteCommandService(Protocol):
    async def list_global_commands(self) -> Dict[str, LiveCommand]: ...

    async def create_command(self, command: CustomCommand) -> int: ...

    async def delete_command(self, command_id: int) -> None: ...


@dataclass
class SyncResult:
    plan: SyncPlan
    # Confirmed by Discord this pass
    registered: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    # Recorded locally but already gone from Discord
    forgotten: List[str] = field(default_factory=list)
    errors: List[SyncError] = field(default_factory=list)
    # Persisted state after the pass
    registered_names: Set[str] = field(default_factory=set)

    @property
    def active(self) -> List[CustomCommand]:
        return self.plan.active

    @property
    def ok(self) -> bool:
        return not self.errors


class CommandSynchronizer:
    """
    Applies a `SyncPlan` against Discord and keeps the registered names in sync.

    Remote calls within a pass run concurrently; passes themselves are
    serialized. Local state only changes after Discord confirms a call.
    """

    def __init__(self, repository: RegisteredCommandStore, remote: RemoteCommandService,
                 call_timeout: Optional[float] = None):
        self.repo = repository
        self.remote = remote
        self.call_timeout = call_timeout
        self._lock = asyncio.Lock()

    async def sync(self, commands: Iterable[CustomCommand]) -> SyncResult:
        """
        Run one synchronization pass for `commands`.

        Raises:
            RegisteredStateUnavailable: If the registered names could not be loaded. Nothing is changed.
            RemoteListingFailed: If the live commands could not be fetched. Nothing is changed.
        """
        async with self._lock:
            return await self._sync(list(commands))

    async def _sync(self, commands: List[CustomCommand]) -> SyncResult:
        try:
            registered = set(await self.repo.load_registered())
        except Exception as e:
            logger.error(f"Failed to load registered commands: {e!r}")
            raise RegisteredStateUnavailable(f"Failed to load registered commands: {e}") from e

        try:
            live = await self._bounded(self.remote.list_global_commands())
        except Exception as e:
            logger.error(f"Failed to fetch global commands: {e}")
            raise RemoteListingFailed(f"Failed to fetch global commands: {e}") from e

        plan = reconcile(commands, registered, live)
        result = SyncResult(plan=plan, errors=list(plan.errors))

        # Wanted commands Discord already has count as registered
        registered |= plan.active_names & set(live)

        confirmed: Set[str] = set()
        try:
            await asyncio.gather(
                *(self._register(command, registered, confirmed, result) for command in plan.to_register),
                *(self._delete(name, live[name].id if name in live else None, registered, result) for name in plan.to_delete),
            )
        finally:
            await self._save(registered, result)

        result.registered = [c.name for c in plan.to_register if c.name in confirmed]
        result.registered_names = set(registered)

        if result.deleted:
            logger.info(f"Deleted {len(result.deleted)} Disabled Custom Commands")
        logger.info(f"Ready. Registered: {len(plan.active)} Custom Commands")
        if result.errors:
            logger.warning(f"Command sync finished with {len(result.errors)} error(s)")
        return result

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self.call_timeout)

    async def _register(self, command: CustomCommand, registered: Set[str],
                        confirmed: Set[str], result: SyncResult) -> None:
        try:
            await self._bounded(self.remote.create_command(command))
        except Exception as e:
            logger.error(f"Failed to register command `{command.name}`: {e!r}")
            result.errors.append(_failure(
                RemoteRegistrationFailed, f"Failed to register command `{command.name}`", command.name, e
            ))
            return

        registered.add(command.name)
        confirmed.add(command.name)
        logger.info(f"Registered command `{command.name}`")

    async def _delete(self, name: str, command_id: Optional[int], registered: Set[str],
                      result: SyncResult) -> None:
        if command_id is None:
            registered.discard(name)
            result.forgotten.append(name)
            logger.debug(f"Command `{name}` is no longer on Discord, forgetting it")
            return

        try:
            await self._bounded(self.remote.delete_command(command_id))
        except Exception as e:
            logger.error(f"Failed to delete command `{name}` ({command_id}): {e!r}")
            result.errors.append(_failure(
                RemoteDeletionFailed, f"Failed to delete command `{name}`", name, e
            ))
            return

        registered.discard(name)
        result.deleted.append(name)
        logger.info(f"Deleted command `{name}` ({command_id})")

    async def _save(self, registered: Set[str], result: SyncResult) -> None:
        try:
            await self.repo.save_registered(registered)
        except Exception as e:
            logger.error(f"Failed to save registered commands: {e!r}")
            result.errors.append(_failure(
                PersistenceWriteFailed, "Failed to save registered commands", None, e
            ))


def _failure(kind: Type[SyncError], message: str, command: Optional[str], cause: Exception) -> SyncError:
    error = kind(f"{message}: {cause}", command=command)
    error.__cause__ = cause
    return error
