import os
import tempfile
import unittest
import warnings
from pathlib import Path
from unittest import mock

from gradnet.domain import BackendUnavailableError
from gradnet.infrastructure._config import GradnetConfig
from gradnet.infrastructure.backends import (
    CpuBackend,
    create_backend,
    default_backend,
)


def _config_without_native(backend: str = "cpu") -> GradnetConfig:
    missing = Path(tempfile.gettempdir()) / "gradnet_selection_missing.so"
    return GradnetConfig(backend=backend, cuda_native_path=missing)


class TestCreateBackend(unittest.TestCase):
    def test_cpu(self):
        with create_backend("cpu", config=_config_without_native()) as be:
            self.assertIsInstance(be, CpuBackend)

    def test_kind_defaults_to_config(self):
        with create_backend(config=_config_without_native("cpu")) as be:
            self.assertEqual(be.name, "cpu")

    def test_kind_is_case_insensitive(self):
        with create_backend(" CPU ", config=_config_without_native()) as be:
            self.assertEqual(be.name, "cpu")

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            create_backend("tpu", config=_config_without_native())

    def test_cuda_without_library_raises(self):
        with self.assertRaises(BackendUnavailableError):
            create_backend("cuda", config=_config_without_native())

    def test_explicit_cpu_ignores_bad_environment(self):
        env = {"GRADNET_BACKEND": "bogus", "GRADNET_CUDA_DEVICE": "x"}
        with mock.patch.dict(os.environ, env):
            with create_backend("cpu") as be:
                self.assertIsInstance(be, CpuBackend)

    def test_omitted_kind_reads_environment(self):
        with mock.patch.dict(os.environ, {"GRADNET_BACKEND": "bogus"}):
            with self.assertRaises(ValueError):
                create_backend()

    def test_auto_falls_back_with_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with self.assertLogs(
                "gradnet.infrastructure.backends._selection", level="WARNING"
            ):
                be = create_backend("auto", config=_config_without_native())
        try:
            self.assertIsInstance(be, CpuBackend)
            self.assertTrue(
                any(issubclass(w.category, RuntimeWarning) for w in caught)
            )
        finally:
            be.close()


class TestDefaultBackend(unittest.TestCase):
    def test_shared_instance(self):
        self.assertIs(default_backend(), default_backend())

    def test_recreated_after_close(self):
        first = default_backend()
        first.close()
        second = default_backend()
        self.assertIsNot(first, second)
        self.assertFalse(second.closed)


if __name__ == "__main__":
    unittest.main()
