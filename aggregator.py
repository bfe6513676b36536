import itertools
import threading
from typing import Iterable, Iterator, Mapping

from tokenizer import Word


class ShardedCounter(Mapping[Word, int]):
    """Word counts shared between worker threads.

    Keys are spread over independently locked shards by hash, so writers
    only contend when their words land in the same shard. Every lock is held
    for a single dict update and never while acquiring another lock.
    """

    def __init__(self, num_shards: int = 64) -> None:
        if num_shards <= 0:
            raise ValueError("num_shards must be positive")

        self._shards: list[dict[Word, int]] = [{} for _ in range(num_shards)]
        self._locks = [threading.Lock() for _ in range(num_shards)]

    def _index(self, word: Word) -> int:
        return hash(word) % len(self._shards)

    def increment(self, word: Word, amount: int = 1) -> None:
        idx = self._index(word)
        shard = self._shards[idx]
        with self._locks[idx]:
            shard[word] = shard.get(word, 0) + amount

    def update(self, words: Iterable[Word]) -> None:
        for word in words:
            self.increment(word)

    def __getitem__(self, word: Word) -> int:
        idx = self._index(word)
        with self._locks[idx]:
            return self._shards[idx][word]

    def __len__(self) -> int:
        total = 0
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                total += len(shard)

        return total

    def __iter__(self) -> Iterator[Word]:
        return iter([word for word, _ in self._copy_items()])

    def _copy_items(self) -> list[tuple[Word, int]]:
        parts = []
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                parts.append(list(shard.items()))

        return list(itertools.chain.from_iterable(parts))

    def snapshot(self) -> list[tuple[Word, int]]:
        "Sorted (word, count) pairs; call once all writers have finished."
        # Code point order is the same as UTF-8 byte order.
        return sorted(self._copy_items())
