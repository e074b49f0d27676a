import unittest

import numpy as np

from gradnet.domain import BackendUnavailableError
from gradnet.infrastructure._config import GradnetConfig
from gradnet.infrastructure.backends import CpuBackend, CudaBackend

from tests._simulated_executor import SimulatedExecutor

RTOL = 1e-5
ATOL = 1e-6


class _ParityCase:
    """
    Runs each primitive on the host backend and on `self.other` with the
    same inputs and compares the materialized results.
    """

    other = None

    def setUp(self):
        self.cpu = CpuBackend()
        self.rng = np.random.default_rng(1234)

    def tearDown(self):
        self.cpu.close()

    def _pair(self, shape):
        data = self.rng.uniform(-2.0, 2.0, size=int(np.prod(shape))).astype(np.float32)
        return self.cpu.allocate(shape, data), self.other.allocate(shape, data)

    def _assert_same(self, a, b):
        np.testing.assert_allclose(
            self.cpu.materialize(a), self.other.materialize(b), rtol=RTOL, atol=ATOL
        )

    def test_add_multiply(self):
        a_c, a_o = self._pair((4, 5))
        b_c, b_o = self._pair((4, 5))
        self._assert_same(self.cpu.add(a_c, b_c), self.other.add(a_o, b_o))
        self._assert_same(self.cpu.multiply(a_c, b_c), self.other.multiply(a_o, b_o))

    def test_matmul(self):
        a_c, a_o = self._pair((3, 7))
        b_c, b_o = self._pair((7, 2))
        self._assert_same(self.cpu.matmul(a_c, b_c), self.other.matmul(a_o, b_o))

    def test_activations(self):
        x_c, x_o = self._pair((17,))
        self._assert_same(self.cpu.tanh(x_c), self.other.tanh(x_o))
        self._assert_same(self.cpu.relu(x_c), self.other.relu(x_o))

    def test_update_in_place(self):
        x_c, x_o = self._pair((6,))
        g = self.rng.uniform(-1.0, 1.0, size=6).astype(np.float32)
        self.cpu.update_in_place(x_c, g, 0.1)
        self.other.update_in_place(x_o, g, 0.1)
        self._assert_same(x_c, x_o)


class TestSimulatedCudaParity(_ParityCase, unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.other = CudaBackend(SimulatedExecutor())

    def tearDown(self):
        self.other.close()
        super().tearDown()


class TestRealCudaParity(_ParityCase, unittest.TestCase):
    def setUp(self):
        try:
            self.other = CudaBackend(config=GradnetConfig.from_env())
        except BackendUnavailableError as e:
            self.skipTest(f"CUDA backend unavailable: {e.reason}")
        super().setUp()

    def tearDown(self):
        self.other.close()
        super().tearDown()


if __name__ == "__main__":
    unittest.main()
