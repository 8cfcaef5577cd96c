from collections import defaultdict


class GenerationCounter:
    """Tags outgoing backend calls so late responses can be recognised.

    ``begin(channel)`` hands out a token; a response is applied only while
    ``is_current(channel, token)`` holds. Starting a newer call or calling
    ``invalidate`` on the channel makes older tokens stale.
    """

    def __init__(self):
        self._current = defaultdict(int)

    def begin(self, channel: str) -> int:
        self._current[channel] += 1
        return self._current[channel]

    def invalidate(self, channel: str) -> None:
        self._current[channel] += 1

    def is_current(self, channel: str, token: int) -> bool:
        return self._current[channel] == token
