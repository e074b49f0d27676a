"""
Cached loader for the gradnet CUDA native library.

This module resolves the compiled primitive-executor library, makes sure its
dependencies (the CUDA runtime) are discoverable by the current Python
process, and returns a `ctypes.CDLL` handle that can be reused across the
codebase.

Key behaviors
-------------
- Cached: `load_gradnet_cuda_native()` is decorated with `lru_cache`, so a
  given library path is loaded only once per process.
- Dependency resolution (Windows): registers ``<CUDA_PATH>/bin`` and the
  library's own folder via `os.add_dll_directory`, falling back to
  prepending onto ``PATH`` when that fails with WinError 206.
- Explicit failure: raises `FileNotFoundError` if the library path does not
  exist, and lets `OSError` from `ctypes.CDLL` propagate.
"""

from __future__ import annotations

import ctypes
import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


def _add_dll_dir_or_path(dir_path: str) -> None:
    """
    Add a directory for DLL dependency resolution (Windows only).

    Uses `os.add_dll_directory` when available. Some Windows setups raise
    WinError 206 ("The filename or extension is too long"); in that case the
    directory is prepended to the process ``PATH`` instead.

    Parameters
    ----------
    dir_path : str
        Directory to add. Non-existent or empty paths are ignored.

    Raises
    ------
    OSError
        Re-raised if `os.add_dll_directory` fails for reasons other than
        WinError 206.
    """
    if not dir_path or not os.path.isdir(dir_path):
        return
    if not hasattr(os, "add_dll_directory"):
        return

    try:
        os.add_dll_directory(dir_path)
    except OSError as e:
        if getattr(e, "winerror", None) == 206:
            cur = os.environ.get("PATH", "")
            parts = cur.split(os.pathsep) if cur else []
            if dir_path not in parts:
                os.environ["PATH"] = dir_path + os.pathsep + cur if cur else dir_path
        else:
            raise


@lru_cache(maxsize=None)
def load_gradnet_cuda_native(
    lib_path: Union[str, Path], cuda_toolkit_path: Optional[Union[str, Path]] = None
) -> ctypes.CDLL:
    """
    Load and cache the gradnet CUDA native library.

    Parameters
    ----------
    lib_path : str | Path
        Path of the compiled native library.
    cuda_toolkit_path : Optional[str | Path], optional
        CUDA toolkit root. On Windows its ``bin`` directory is added to the
        DLL search path so the CUDA runtime resolves.

    Returns
    -------
    ctypes.CDLL
        Loaded library handle.

    Raises
    ------
    FileNotFoundError
        If the library does not exist at `lib_path`.
    OSError
        If the library (or one of its dependencies) fails to load.
    """
    p = Path(lib_path).resolve()
    if not p.exists():
        raise FileNotFoundError(f"gradnet CUDA native library not found at: {p}")

    if sys.platform.startswith("win"):
        if cuda_toolkit_path:
            _add_dll_dir_or_path(os.path.join(str(cuda_toolkit_path), "bin"))
        _add_dll_dir_or_path(str(p.parent))

    lib = ctypes.CDLL(str(p))
    logger.debug("Loaded CUDA native library from %s", p)
    return lib
