"""
Environment-driven configuration for gradnet.

Backend selection and the location of the CUDA native library are read from
environment variables, optionally preloaded from a ``.env`` file with
`python-dotenv`:

- ``GRADNET_BACKEND``: ``cpu`` (default), ``cuda`` or ``auto``.
- ``GRADNET_CUDA_NATIVE``: path to the compiled native primitive library.
  Defaults to the platform-specific file under
  ``gradnet/infrastructure/native_cuda/bin``.
- ``GRADNET_CUDA_DEVICE``: CUDA device index (default 0).
- ``CUDA_PATH``: CUDA toolkit root; its ``bin`` directory is added to the
  DLL search path on Windows.

Invalid values raise `ValueError` at load time rather than when a backend is
first used.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv

BACKEND_KINDS = ("cpu", "cuda", "auto")

_NATIVE_DIR = Path(__file__).resolve().parent / "native_cuda" / "bin"


def default_native_library_path() -> Path:
    """
    Return the default location of the CUDA native library for this platform.

    Returns
    -------
    Path
        ``gradnet_cuda_native.dll`` on Windows, ``libgradnet_cuda_native.dylib``
        on macOS and ``libgradnet_cuda_native.so`` elsewhere.
    """
    if sys.platform.startswith("win"):
        name = "gradnet_cuda_native.dll"
    elif sys.platform == "darwin":
        name = "libgradnet_cuda_native.dylib"
    else:
        name = "libgradnet_cuda_native.so"
    return _NATIVE_DIR / name


@dataclass(frozen=True)
class GradnetConfig:
    """
    Resolved runtime configuration.

    Attributes
    ----------
    backend : str
        Default backend kind used by `create_backend` when none is given.
    cuda_native_path : Path
        Path of the native primitive library loaded by the CUDA backend.
    cuda_device : int
        CUDA device index selected when the CUDA backend initializes.
    cuda_toolkit_path : Optional[Path]
        CUDA toolkit root, if known.
    """

    backend: str = "cpu"
    cuda_native_path: Path = default_native_library_path()
    cuda_device: int = 0
    cuda_toolkit_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.backend not in BACKEND_KINDS:
            raise ValueError(
                f"Invalid backend '{self.backend}'. Expected one of {BACKEND_KINDS}."
            )
        if self.cuda_device < 0:
            raise ValueError(
                f"cuda_device must be non-negative, got {self.cuda_device}."
            )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[Union[str, Path]] = None,
    ) -> "GradnetConfig":
        """
        Build a configuration from environment variables.

        Parameters
        ----------
        environ : Optional[Mapping[str, str]], optional
            Mapping to read from. Defaults to ``os.environ``.
        dotenv_path : Optional[str | Path], optional
            If given, the file is loaded into ``os.environ`` first (existing
            variables are not overridden).

        Returns
        -------
        GradnetConfig
            The resolved configuration.

        Raises
        ------
        ValueError
            If a variable holds an invalid value.
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path, override=False)
        env = os.environ if environ is None else environ

        backend = env.get("GRADNET_BACKEND", "cpu").strip().lower() or "cpu"

        native = env.get("GRADNET_CUDA_NATIVE", "").strip()
        native_path = Path(native) if native else default_native_library_path()

        device_raw = env.get("GRADNET_CUDA_DEVICE", "0").strip() or "0"
        try:
            device = int(device_raw)
        except ValueError:
            raise ValueError(
                f"GRADNET_CUDA_DEVICE must be an integer, got {device_raw!r}."
            ) from None

        toolkit = env.get("CUDA_PATH", "").strip()

        return cls(
            backend=backend,
            cuda_native_path=native_path,
            cuda_device=device,
            cuda_toolkit_path=Path(toolkit) if toolkit else None,
        )
