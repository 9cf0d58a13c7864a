"""Onion-model middleware composition."""

from functools import reduce
from typing import Sequence

from ..protocol import InvokeFn, Middleware


def compose(middlewares: Sequence[Middleware], core: InvokeFn) -> InvokeFn:
    """
    Wrap ``core`` with ``middlewares`` so the first one is the outermost layer.

    For [A, B, C] a call runs A-before, B-before, C-before, core, C-after,
    B-after, A-after. An empty sequence returns ``core`` itself.
    """
    if not middlewares:
        return core
    return reduce(lambda next_fn, middleware: middleware(next_fn), reversed(middlewares), core)
