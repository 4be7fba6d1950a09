"""
Bounded worker pool of browser contexts.

A WorkerPool owns a fixed number of isolated browsing contexts and runs async
tasks against them. Idle contexts wait in an asyncio.Queue; a task has to take
one before it can run and hands it back when it finishes, so no more than
``size`` tasks are ever in flight and no context is shared between two
running tasks.

Typical cycle:

    pool = await WorkerPool.launch(5, PlaywrightContextFactory())
    async with pool:
        await pool.run_once(Task(login, "login"))
        outcomes = await pool.submit_all([Task(fetch_a), Task(fetch_b)])
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
    TypeVar,
    Union,
)

from .errors import PoolClosedError, PoolLaunchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BrowsingContext:
    """
    One pool slot: a browser context with its single page.

    ``configure_once`` lets callers apply per-context setup (such as request
    filtering) the first time they need it without repeating it on every task.
    """

    def __init__(self, slot_id: int, context: Any, page: Any):
        self.slot_id = slot_id
        self.context = context
        self.page = page
        self._configured: Set[str] = set()

    async def configure_once(
        self, name: str, configure: Callable[["BrowsingContext"], Awaitable[None]]
    ) -> bool:
        """Run ``configure`` unless a step called ``name`` already ran here."""
        if name in self._configured:
            return False
        await configure(self)
        self._configured.add(name)
        return True

    async def close(self) -> None:
        await self.context.close()

    def __repr__(self) -> str:
        return f"BrowsingContext(slot_id={self.slot_id})"


class ContextFactory(Protocol):
    """Creates browsing contexts on top of some browser engine."""

    async def start(self) -> None: ...

    async def new_context(self, slot_id: int) -> BrowsingContext: ...

    async def stop(self) -> None: ...


TaskFunc = Callable[[BrowsingContext], Awaitable[T]]


@dataclass
class Task(Generic[T]):
    """A unit of work run against one pool context."""
    run: TaskFunc
    label: str = ""

    def __str__(self) -> str:
        return self.label or getattr(self.run, "__name__", repr(self.run))


@dataclass
class TaskOutcome(Generic[T]):
    """Value returned by a task, or the exception it raised."""
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


TaskErrorHook = Callable[[BaseException, Task], None]


def log_task_error(error: BaseException, task: Task) -> None:
    logger.error("Error crawling %s: %s", task, error)


def _as_task(task: Union[Task, TaskFunc]) -> Task:
    return task if isinstance(task, Task) else Task(task)


class WorkerPool:
    """
    Fixed-size pool of browsing contexts with bounded task dispatch.

    Build one with ``WorkerPool.launch`` and always close it, either
    explicitly or with ``async with pool:``. A pool is meant to live for one
    scrape cycle; nothing about it is global.
    """

    def __init__(
        self,
        factory: ContextFactory,
        contexts: Sequence[BrowsingContext],
        on_task_error: Optional[TaskErrorHook] = None,
    ):
        self._factory = factory
        self._contexts = list(contexts)
        self._idle: "asyncio.Queue[BrowsingContext]" = asyncio.Queue()
        for ctx in self._contexts:
            self._idle.put_nowait(ctx)
        self._on_task_error = on_task_error or log_task_error
        self._closed = False
        self._close_lock = asyncio.Lock()

    @classmethod
    async def launch(
        cls,
        pool_size: int,
        factory: ContextFactory,
        on_task_error: Optional[TaskErrorHook] = None,
    ) -> "WorkerPool":
        """
        Start the engine and open ``pool_size`` contexts.

        Raises:
            ValueError: if pool_size is smaller than 1
            PoolLaunchError: if the engine or any context fails to start;
                             whatever was already opened is released first
        """
        if pool_size < 1:
            raise ValueError(f"pool_size must be at least 1, got {pool_size}")

        try:
            await factory.start()
        except Exception as e:
            raise PoolLaunchError(f"Could not start browser engine: {e}") from e

        contexts: List[BrowsingContext] = []
        try:
            for slot_id in range(pool_size):
                contexts.append(await factory.new_context(slot_id))
        except Exception as e:
            for ctx in contexts:
                await _close_quietly(ctx)
            await _stop_quietly(factory)
            raise PoolLaunchError(f"Could not open browser context: {e}") from e

        logger.info("Worker pool launched with %d contexts", pool_size)
        return cls(factory, contexts, on_task_error)

    @property
    def size(self) -> int:
        return len(self._contexts)

    @property
    def closed(self) -> bool:
        return self._closed

    async def run_once(self, task: Union[Task[T], TaskFunc]) -> T:
        """
        Run a task on the next free context and return its result.

        The caller waits until a context frees up and the task finishes;
        the task's exception, if any, is re-raised here.
        """
        task = _as_task(task)
        if self._closed:
            raise PoolClosedError(f"Cannot run {task}: pool is closed")

        ctx = await self._idle.get()
        try:
            return await task.run(ctx)
        finally:
            self._idle.put_nowait(ctx)

    async def submit_all(
        self, tasks: Sequence[Union[Task[T], TaskFunc]]
    ) -> List[TaskOutcome[T]]:
        """
        Run every task, each on whichever context frees up first.

        At most ``size`` tasks run at once. Returns one outcome per task in
        input order once all of them have finished. A failing task is
        reported to the error hook and does not stop the others.
        """
        if self._closed:
            raise PoolClosedError("Cannot submit tasks: pool is closed")

        async def guarded(task: Task[T]) -> TaskOutcome[T]:
            try:
                return TaskOutcome(value=await self.run_once(task))
            except Exception as e:
                self._on_task_error(e, task)
                return TaskOutcome(error=e)

        return list(await asyncio.gather(*(guarded(_as_task(t)) for t in tasks)))

    async def close(self) -> None:
        """Release every context and stop the engine. Safe to call twice."""
        async with self._close_lock:
            if self._closed:
                return
            self._closed = True
            for ctx in self._contexts:
                await _close_quietly(ctx)
            await _stop_quietly(self._factory)
            logger.info("Worker pool closed")

    async def __aenter__(self) -> "WorkerPool":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def _close_quietly(ctx: BrowsingContext) -> None:
    try:
        await ctx.close()
    except Exception as e:
        logger.warning("Error while closing %r: %s", ctx, e)


async def _stop_quietly(factory: ContextFactory) -> None:
    try:
        await factory.stop()
    except Exception as e:
        logger.warning("Error while stopping browser engine: %s", e)
