# accountLocks.py
# one lock per deployer address, so deployments from the same account never race for a nonce
import asyncio


class AccountLockRegistry:
    def __init__(self):
        self._locks = {}
        self._registry_lock = asyncio.Lock()

    # get the lock of an address, created lazily
    async def get(self, address):
        key = address.lower()
        lock = self._locks.get(key)
        if lock is None:
            async with self._registry_lock:
                lock = self._locks.get(key)
                if lock is None:  # double-check inside lock
                    lock = asyncio.Lock()
                    self._locks[key] = lock
        return lock

    def locked(self, address):
        lock = self._locks.get(address.lower())
        return lock is not None and lock.locked()
