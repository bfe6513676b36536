import itertools
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from aggregator import ShardedCounter
from config import JobConfig
from tokenizer import FileAccessError, Word, read_words

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileError:
    path: str
    message: str


@dataclass
class RunResult:
    counts: list[tuple[Word, int]]
    errors: list[FileError] = field(default_factory=list)
    timed_out: bool = False

    @property
    def total_words(self) -> int:
        return sum(count for _, count in self.counts)


class _Deadline:
    def __init__(self, timeout: float | None) -> None:
        self._end = None if timeout is None else time.monotonic() + timeout
        self._hit = threading.Event()

    def expired(self) -> bool:
        if self._end is not None and time.monotonic() >= self._end:
            self._hit.set()
        return self._hit.is_set()

    @property
    def hit(self) -> bool:
        return self._hit.is_set()


def count_words(config: JobConfig, counter: ShardedCounter | None = None) -> RunResult:
    """Count the words of every file in config on one bounded thread pool.

    Files and their batches share the pool. A file task submits its batches
    and returns their futures without waiting for them, so no task blocks on
    another and a saturated pool still drains. Counts are read only after
    every file and every batch future has finished.
    """
    if counter is None:
        counter = ShardedCounter(config.num_shards)

    deadline = _Deadline(config.timeout)
    errors: list[FileError] = []

    log.info(
        "Counting %d file(s) with max_threads=%d batch_size=%d",
        len(config.files),
        config.max_threads,
        config.batch_size,
    )

    with ThreadPoolExecutor(
        max_workers=config.max_threads, thread_name_prefix="wordcount"
    ) as exe:
        file_futures = [
            exe.submit(process_file, exe, path, config.batch_size, counter, deadline)
            for path in config.files
        ]

        # Every file task has submitted its batches once this returns, so an
        # error raised below can no longer race a submit against shutdown.
        wait(file_futures)

        batch_futures: list[Future[None]] = []
        for future in file_futures:
            match future.result():
                case FileError() as err:
                    errors.append(err)
                case list() as submitted:
                    batch_futures.extend(submitted)

        wait(batch_futures)

    # Re-raise the first batch failure, if any.
    for future in batch_futures:
        future.result()

    result = RunResult(counts=counter.snapshot(), errors=errors, timed_out=deadline.hit)
    log.info(
        "Counted %d word(s), %d distinct, %d file error(s)%s",
        result.total_words,
        len(result.counts),
        len(result.errors),
        ", timed out" if result.timed_out else "",
    )
    return result


def process_file(
    exe: ThreadPoolExecutor,
    path: str,
    batch_size: int,
    counter: ShardedCounter,
    deadline: _Deadline,
) -> list[Future[None]] | FileError:
    if deadline.expired():
        return []

    try:
        words = list(read_words(path))
    except FileAccessError as e:
        log.warning("%s", e.notice)
        return FileError(path, e.notice)

    futures = []
    for i, batch in enumerate(itertools.batched(words, batch_size)):
        if deadline.expired():
            log.info("Deadline reached, %s stopped after %d batch(es)", path, i)
            break

        log.debug("Dispatching batch %d of %s (%d words)", i, path, len(batch))
        futures.append(exe.submit(counter.update, batch))

    return futures
