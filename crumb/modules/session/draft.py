"""
Copy-on-write updates with structural sharing.

produce() hands a recipe a deep copy of the base value to mutate (or to
replace by returning a new value), then reconciles the result with the base:
every part that compares equal to the original keeps the original object,
so an untouched value comes back as the very same object and a changed one
only differs along the paths that changed.
"""

import copy
from typing import Any, Callable

_MISSING = object()

Recipe = Callable[[Any], Any]


def produce(base: Any, recipe: Recipe) -> Any:
    """
    Apply recipe to a draft of base and return the next value.

    The recipe may mutate the draft in place and return None, or return a
    replacement value. base itself is never mutated.

    Returns:
        base itself if nothing changed, otherwise a new value sharing
        unchanged sub-structures with base
    """
    draft = copy.deepcopy(base)
    result = recipe(draft)
    if result is None:
        result = draft
    return reconcile(base, result)


def reconcile(previous: Any, current: Any) -> Any:
    """Return previous wherever current is equal to it, recursing into dicts, lists and tuples."""
    if previous is current:
        return previous
    if type(previous) is not type(current):
        return current

    if isinstance(current, dict):
        merged = {
            key: reconcile(previous[key], value) if key in previous else value
            for key, value in current.items()
        }
        if len(merged) == len(previous) and all(
            value is previous.get(key, _MISSING) for key, value in merged.items()
        ):
            return previous
        # Shallow copy keeps dict subclasses (OrderedDict, defaultdict factory) intact
        result = copy.copy(current)
        result.update(merged)
        return result

    if type(current) in (list, tuple):
        shared = [reconcile(old, new) for old, new in zip(previous, current)]
        shared.extend(current[len(previous):])
        if len(current) == len(previous) and all(new is old for new, old in zip(shared, previous)):
            return previous
        return type(current)(shared)

    return previous if current == previous else current
