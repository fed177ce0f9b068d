"""
Trace sources

A TraceSource is a named fan-out point: components fire it, any number of
listeners (statistics, sinks, trace writers) receive the same arguments in
connection order.
"""

from typing import Callable


class TraceSource:
    def __init__(self, name: str):
        self.name = name
        self.listeners: list[Callable[..., None]] = []

    def connect(self, listener: Callable[..., None]):
        self.listeners.append(listener)

    def disconnect(self, listener: Callable[..., None]):
        """remove a listener; raises ValueError if it is not connected"""
        self.listeners.remove(listener)

    def notify(self, *args):
        # copy so a listener may disconnect itself while being notified
        for listener in list(self.listeners):
            listener(*args)

    def __len__(self):
        return len(self.listeners)

    def __str__(self):
        return f"TraceSource({self.name}, {len(self.listeners)} listeners)"
