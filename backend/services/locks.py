import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager


class KeyedLock:
    """One asyncio.Lock per key; serializes writers touching the same key in this process."""

    def __init__(self):
        self._locks = {}
        self._holders = defaultdict(int)  # tasks holding or waiting, per key

    @asynccontextmanager
    async def hold(self, key):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def __len__(self):
        return len(self._locks)


# Serializes plan and family-code writes per elderly id
elderly_locks = KeyedLock()
