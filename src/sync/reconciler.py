"""
Diff between the configured custom commands and what Discord already has.

`reconcile` is pure: it only decides what to do. Applying the plan is the
job of `sync.service.CommandSynchronizer`.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Set, Union

from config.models import CustomCommand
from .errors import DuplicateCommandName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveCommand:
    """A global command as Discord reports it. Unknown fields are None and never compared."""
    id: int
    description: Optional[str] = None
    dm_permission: Optional[bool] = None

    def differs_from(self, command: CustomCommand) -> bool:
        if self.description is not None and self.description != command.description:
            return True
        return self.dm_permission is not None and self.dm_permission != command.allow_in_dm


@dataclass
class SyncPlan:
    # Enabled commands missing from Discord or out of date there, in declaration order
    to_register: List[CustomCommand] = field(default_factory=list)
    # Names declared more than once; later occurrences are ignored
    to_skip: Set[str] = field(default_factory=set)
    # Names Discord or local state knows about that are no longer wanted
    to_delete: Set[str] = field(default_factory=set)
    # Every enabled command kept this pass, live or not, in declaration order
    active: List[CustomCommand] = field(default_factory=list)
    errors: List[DuplicateCommandName] = field(default_factory=list)

    @property
    def active_names(self) -> Set[str]:
        return {command.name for command in self.active}

    @property
    def is_noop(self) -> bool:
        return not self.to_register and not self.to_delete


def reconcile(
    desired: Iterable[CustomCommand],
    registered_prev: Iterable[str],
    remote_live: Union[Iterable[str], Mapping[str, LiveCommand]],
) -> SyncPlan:
    """
    Compare the desired commands against previously registered and live names.

    Args:
        desired: Commands from the config, in declaration order. Disabled ones are ignored.
        registered_prev: Names recorded as registered by earlier passes.
        remote_live: Global commands Discord currently reports. With a mapping of
            name to `LiveCommand`, live commands whose description or DM flag
            changed are registered again.

    Returns:
        SyncPlan: What to register, skip and delete.
    """
    details = remote_live if isinstance(remote_live, dict) else {}
    live = set(remote_live)
    plan = SyncPlan()
    seen: Set[str] = set()

    for command in desired:
        if not command.enabled:
            continue

        if command.name in seen:
            logger.error(f"Attempting to register duplicate command `{command.name}`")
            plan.to_skip.add(command.name)
            plan.errors.append(DuplicateCommandName(
                f"Attempting to register duplicate command `{command.name}`",
                command=command.name,
            ))
            continue

        seen.add(command.name)
        plan.active.append(command)
        if command.name not in live:
            plan.to_register.append(command)
        elif command.name in details and details[command.name].differs_from(command):
            logger.info(f"Command `{command.name}` changed, updating it")
            plan.to_register.append(command)

    # Disabled and removed commands are treated the same
    plan.to_delete = (set(registered_prev) | live) - seen

    logger.debug(
        f"Sync plan: register={[c.name for c in plan.to_register]} "
        f"skip={sorted(plan.to_skip)} delete={sorted(plan.to_delete)}"
    )
    return plan
