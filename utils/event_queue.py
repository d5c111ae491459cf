"""
MIT License

Copyright (c) 2019-Present Jake Sichley

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

import asyncio
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from utils.logging_formatter import bot_logger
from utils.role_store import RoleStore

T = TypeVar('T')


@dataclass
class QueuedEvent:
    """
    An event waiting to be handled.

    Attributes:
        guild_id (int): The guild the event belongs to.
        name (str): A short description of the event, for logging.
        handler (Callable[[], Awaitable[Any]]): The coroutine function that handles the event.
        future (asyncio.Future): Resolved with the handler's result or exception.
    """

    guild_id: int
    name: str
    handler: Callable[[], Awaitable[Any]]
    future: asyncio.Future


class GuildEventQueue:
    """
    A single ordered queue for commands and reaction events.
    Events are handled one at a time, in arrival order, while holding their guild's lock.

    Attributes:
        store (RoleStore): The mapping store that owns the per-guild locks.
        _queue (asyncio.Queue[QueuedEvent]): The pending events.
        _worker (Optional[asyncio.Task]): The task consuming the queue.
    """

    def __init__(self, store: RoleStore) -> None:
        """
        The constructor for the GuildEventQueue class.

        Parameters:
            store (RoleStore): The mapping store that owns the per-guild locks.
        """

        self.store = store
        self._queue: asyncio.Queue[QueuedEvent] = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """
        Whether the worker task is consuming events.

        Parameters:
            None.

        Returns:
            (bool).
        """

        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        """
        Starts the worker task. Must be called from within a running event loop.

        Parameters:
            None.

        Returns:
            None.
        """

        if not self.running:
            self._worker = asyncio.create_task(self._consume(), name='guild-event-queue')

    async def stop(self) -> None:
        """
        Stops the worker task. Events that haven't been handled yet are cancelled.

        Parameters:
            None.

        Returns:
            None.
        """

        if self._worker is None:
            return

        self._worker.cancel()

        with suppress(asyncio.CancelledError):
            await self._worker

        self._worker = None

        while not self._queue.empty():
            self._queue.get_nowait().future.cancel()

    async def submit(self, guild_id: int, handler: Callable[[], Awaitable[T]], *, name: str = 'event') -> T:
        """
        Queues an event and waits for it to be handled.

        Parameters:
            guild_id (int): The guild the event belongs to.
            handler (Callable[[], Awaitable[T]]): The coroutine function that handles the event.
            name (str): A short description of the event, for logging.

        Raises:
            RuntimeError: The queue hasn't been started.

        Returns:
            (T): The handler's result. Exceptions raised by the handler are re-raised here.
        """

        if not self.running:
            raise RuntimeError('GuildEventQueue has not been started.')

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put(QueuedEvent(guild_id, name, handler, future))
        return await future

    async def _consume(self) -> None:
        """
        Handles queued events forever. A failing handler never stops the worker.

        Parameters:
            None.

        Returns:
            None.
        """

        while True:
            event = await self._queue.get()

            try:
                async with self.store.lock(event.guild_id):
                    result = await event.handler()
            except asyncio.CancelledError:
                event.future.cancel()
                raise
            except Exception as e:
                if event.future.done():
                    bot_logger.error(
                        f'Unhandled exception in {event.name} [Guild ID: {event.guild_id}]',
                        exc_info=(type(e), e, e.__traceback__)
                    )
                else:
                    event.future.set_exception(e)
            else:
                if not event.future.done():
                    event.future.set_result(result)
            finally:
                self._queue.task_done()
