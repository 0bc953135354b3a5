from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from .offset_tree import OffsetTree

logger = logging.getLogger(__name__)

OT_OPTION = "ot"
BASE_OPTION = "cb_explore"
DEFAULT_BASE_ACTIONS = "2"


@dataclass
class OffsetTreeOptions:
    """Parsed offset tree options.

    Parameters
    ----------
    num_actions : int
        Number of actions (leaves), taken from the ``ot`` option.
    """

    num_actions: int

    @classmethod
    def from_options(cls, options: MutableMapping[str, Any]) -> Optional["OffsetTreeOptions"]:
        if options.get(OT_OPTION) is None:
            return None
        num_actions = options[OT_OPTION]
        if isinstance(num_actions, str):
            num_actions = int(num_actions)
        if num_actions < 0:
            raise ValueError(f"--{OT_OPTION} must be >= 0, got {num_actions}")
        return cls(num_actions=num_actions)


def offset_tree_setup(options: MutableMapping[str, Any]) -> Optional[OffsetTree]:
    """Build an ``OffsetTree`` from an options mapping.

    Returns ``None`` when the ``ot`` option is absent. Otherwise the
    ``cb_explore`` option is defaulted to a two-outcome base before the
    tree is built.
    """
    parsed = OffsetTreeOptions.from_options(options)
    if parsed is None:
        return None

    if options.get(BASE_OPTION) is None:
        options[BASE_OPTION] = DEFAULT_BASE_ACTIONS
        logger.info("Offset tree: defaulting %s to %s", BASE_OPTION, DEFAULT_BASE_ACTIONS)

    logger.info("Offset tree with %d actions", parsed.num_actions)
    return OffsetTree(parsed.num_actions)
