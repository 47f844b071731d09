"""Call recording and behavior playback engine."""

from understudy.core.actions import Action, ActionKind, ActionQueue
from understudy.core.call import CallRecord, next_sequence_number
from understudy.core.promise import Deferred, DeferredFactory, PromiseAdapter, PromiseFactory, promises
from understudy.core.recorder import BoundRecorder, Recorder, spy, stub

__all__ = [
    "Action",
    "ActionKind",
    "ActionQueue",
    "BoundRecorder",
    "CallRecord",
    "Deferred",
    "DeferredFactory",
    "PromiseAdapter",
    "PromiseFactory",
    "Recorder",
    "next_sequence_number",
    "promises",
    "spy",
    "stub",
]
