from __future__ import annotations

import ctypes
from typing import Any, Sequence


def bind_symbol(lib: Any, sym: str, argtypes: Sequence[Any], restype: Any = ctypes.c_int):
    """
    Resolve an exported symbol and bind its ctypes signature (idempotent).

    Raises
    ------
    RuntimeError
        If the library does not export `sym`.
    """
    try:
        fn = getattr(lib, sym)
    except AttributeError:
        raise RuntimeError(f"Native library missing symbol: {sym}") from None
    fn.argtypes = list(argtypes)
    fn.restype = restype
    return fn


def check_status(sym: str, st: int) -> None:
    if int(st) != 0:
        raise RuntimeError(f"{sym} failed with status={int(st)}")
