"""Call records and the process-wide call sequence."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any

# Shared by every recorder so calls on independent spies can be ordered.
_sequence = itertools.count(1)


def next_sequence_number() -> int:
    """Allocate the next global call sequence number."""
    return next(_sequence)


@dataclass(slots=True, eq=False)
class CallRecord:
    """A single recorded invocation.

    Outcome fields are filled once the call completes: `returned` holds the
    produced value, `threw` the exception that propagated. Both stay `None`
    when the call produced nothing.
    """

    sequence_number: int
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    receiver: Any = None
    returned: Any = None
    threw: BaseException | None = None

    @classmethod
    def placeholder(cls) -> CallRecord:
        """Empty record used as `last_call` before any call happens."""
        return cls(sequence_number=0)

    @property
    def arguments(self) -> tuple[Any, ...]:
        return self.args

    @property
    def arg(self) -> Any:
        """First positional argument, or None."""
        return self.args[0] if self.args else None
