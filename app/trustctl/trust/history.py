"""Trust store history recording.

Records trust store mutations to the shared history file, providing an
audit trail of added, deleted and rehashed records.
"""

from pathlib import Path

from trustctl.core.state import StateManager
from trustctl.models.history import HistoryActionType, create_history_entry


def record_trust_action(
    action_type: HistoryActionType,
    paths: list[str],
    count: int,
    *,
    trust_file: str | Path | None = None,
    command: str | None = None,
) -> None:
    """Record a trust store mutation to history.

    Args:
        action_type: Kind of mutation.
        paths: Paths or prefixes the mutation was requested for.
        count: Number of trust records affected.
        trust_file: Trust file the mutation was restricted to, if any.
        command: Command that triggered the mutation.

    Raises:
        RuntimeError: If the state directory cannot be created.
        OSError: If the history file cannot be written.
    """
    metadata: dict[str, str] = {}
    if trust_file is not None:
        metadata["trust_file"] = str(trust_file)
    if command is not None:
        metadata["command"] = command

    entry = create_history_entry(
        action_type=action_type,
        paths=paths,
        count=count,
        metadata=metadata,
    )
    StateManager().record_action(entry)
