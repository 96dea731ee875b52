from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from ..models.domain import Direction

T = TypeVar("T")


def move(
    items: Sequence[T],
    key: Any,
    direction: Direction,
    key_fn: Optional[Callable[[T], Any]] = None,
) -> Optional[Tuple[List[T], int, int]]:
    """Swap the item identified by ``key`` with its neighbour in ``direction``.

    Returns ``(reordered, from_index, to_index)``, or None when the key is
    absent or the item already sits at that boundary. The member set is never
    changed; the input sequence is not mutated.
    """
    key_fn = key_fn or (lambda item: item)
    direction = Direction(direction)
    index = next((i for i, item in enumerate(items) if key_fn(item) == key), None)
    if index is None:
        return None
    target = index + direction.step
    if target < 0 or target >= len(items):
        return None
    reordered = list(items)
    reordered[index], reordered[target] = reordered[target], reordered[index]
    return reordered, index, target
