from typing import Iterable, Iterator, List, Tuple


def three_pairwise(iterable: Iterable[str]) -> Iterator[Tuple[str, str, str]]:
    # based on itertools.pairwise
    iterator = iter(iterable)

    a = next(iterator, None)
    b = next(iterator, None)

    for c in iterator:
        yield a, b, c
        a, b = b, c


def form_trigrams(letters: str) -> List[str]:
    trigrams = ["".join(window) for window in three_pairwise(letters)]

    assert len(trigrams) == max(len(letters) - 2, 0)

    return trigrams
