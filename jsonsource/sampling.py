import itertools
import random
from typing import Iterable, Iterator, TypeVar

from .options import JSONOptions

T = TypeVar("T")


def sample(records: Iterable[T], options: JSONOptions) -> Iterator[T]:
    """Lazily draw the records used for schema inference.

    Each record is kept with probability ``sampling_ratio`` using a generator
    seeded with ``sampling_seed``, so the same input and options always give
    the same sample. ``sample_size`` then caps the number of records kept.
    """
    sampled: Iterator[T] = iter(records)
    if options.sampling_ratio < 1.0:
        rng = random.Random(options.sampling_seed)
        ratio = options.sampling_ratio
        sampled = (r for r in sampled if rng.random() < ratio)
    if options.sample_size is not None:
        sampled = itertools.islice(sampled, options.sample_size)
    return sampled
