import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def shuffle(sequence: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """
    Return a new list holding a uniformly random permutation of ``sequence``.

    Fisher-Yates: walk from the last index down to 1 and swap each slot with
    a uniformly chosen index in [0, i]. The input is never modified.

    Args:
        sequence: Items to shuffle
        rng: Random source; a freshly seeded generator is used when omitted,
            so concurrent requests never share generator state
    """
    if rng is None:
        rng = random.Random()
    shuffled = list(sequence)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
