import gc
import unittest

import numpy as np

from gradnet.domain import (
    BackendMismatchError,
    BackendReleasedError,
    DimensionMismatchError,
    IBackend,
    RankError,
    Shape,
    ShapeError,
    ShapeMismatchError,
)
from gradnet.infrastructure.backends import CpuBackend, CudaBackend

from tests._simulated_executor import SimulatedExecutor


class _BackendContract:
    """
    Behaviour every backend must share. Subclasses provide `make_backend`.
    """

    def make_backend(self):
        raise NotImplementedError

    def setUp(self):
        self.be = self.make_backend()

    def tearDown(self):
        self.be.close()

    def _host(self, t):
        return self.be.materialize(t)

    def test_satisfies_protocol(self):
        self.assertIsInstance(self.be, IBackend)

    def test_allocate_zero_filled(self):
        t = self.be.allocate(Shape(2, 3))
        self.assertEqual(t.shape, Shape(2, 3))
        np.testing.assert_array_equal(self._host(t), np.zeros(6, dtype=np.float32))

    def test_allocate_with_data(self):
        t = self.be.allocate((3,), [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(self._host(t), [1.0, 2.0, 3.0])

    def test_allocate_rejects_wrong_length(self):
        with self.assertRaises(ShapeError):
            self.be.allocate((2, 2), [1.0, 2.0, 3.0])

    def test_materialize_returns_independent_copies(self):
        t = self.be.allocate((2,), [1.0, 2.0])
        a = self._host(t)
        b = self._host(t)
        self.assertIsNot(a, b)
        a[0] = 99.0
        np.testing.assert_array_equal(self._host(t), [1.0, 2.0])

    def test_add_and_multiply(self):
        a = self.be.allocate((3,), [1.0, 2.0, 3.0])
        b = self.be.allocate((3,), [4.0, 5.0, 6.0])
        np.testing.assert_allclose(self._host(self.be.add(a, b)), [5.0, 7.0, 9.0])
        np.testing.assert_allclose(
            self._host(self.be.multiply(a, b)), [4.0, 10.0, 18.0]
        )

    def test_ops_do_not_alias_inputs(self):
        a = self.be.allocate((2,), [1.0, 2.0])
        b = self.be.allocate((2,), [3.0, 4.0])
        c = self.be.add(a, b)
        self.assertIsNot(c, a)
        np.testing.assert_array_equal(self._host(a), [1.0, 2.0])

    def test_elementwise_shape_mismatch(self):
        a = self.be.allocate((2, 3))
        b = self.be.allocate((3, 2))
        with self.assertRaises(ShapeMismatchError):
            self.be.add(a, b)
        with self.assertRaises(ShapeMismatchError):
            self.be.multiply(a, b)

    def test_matmul(self):
        a = self.be.allocate((2, 3), [1, 2, 3, 4, 5, 6])
        b = self.be.allocate((3, 2), [7, 8, 9, 10, 11, 12])
        c = self.be.matmul(a, b)
        self.assertEqual(c.shape, Shape(2, 2))
        np.testing.assert_allclose(self._host(c), [58, 64, 139, 154])

    def test_matmul_rank_and_inner_dim_checks(self):
        a = self.be.allocate((2, 3))
        with self.assertRaises(RankError):
            self.be.matmul(a, self.be.allocate((3,)))
        with self.assertRaises(DimensionMismatchError):
            self.be.matmul(a, self.be.allocate((2, 2)))

    def test_tanh_and_relu(self):
        x = self.be.allocate((4,), [-2.0, -0.5, 0.0, 1.5])
        np.testing.assert_allclose(
            self._host(self.be.tanh(x)), np.tanh([-2.0, -0.5, 0.0, 1.5]), rtol=1e-6
        )
        np.testing.assert_allclose(self._host(self.be.relu(x)), [0.0, 0.0, 0.0, 1.5])

    def test_update_in_place_keeps_identity(self):
        x = self.be.allocate((3,), [1.0, 2.0, 3.0])
        handle = x.handle
        self.be.update_in_place(x, [0.1, -0.2, 0.3], 0.5)
        self.assertIs(x.handle, handle)
        np.testing.assert_allclose(
            self._host(x), [0.95, 2.1, 2.85], rtol=1e-6, atol=1e-7
        )

    def test_update_in_place_length_mismatch(self):
        x = self.be.allocate((3,))
        with self.assertRaises(ShapeMismatchError):
            self.be.update_in_place(x, [1.0, 2.0], 0.1)

    def test_release_then_use_raises(self):
        x = self.be.allocate((2,), [1.0, 2.0])
        self.be.release(x)
        with self.assertRaises(BackendReleasedError):
            self.be.materialize(x)
        # double release is a no-op
        self.be.release(x)

    def test_release_updates_live_count(self):
        base = self.be.live_count
        x = self.be.allocate((2,))
        self.assertEqual(self.be.live_count, base + 1)
        x.release()
        self.assertEqual(self.be.live_count, base)

    def test_dropped_payload_is_freed(self):
        base = self.be.live_count
        x = self.be.allocate((8,))
        del x
        gc.collect()
        self.assertEqual(self.be.live_count, base)

    def test_close_frees_everything_and_retires(self):
        x = self.be.allocate((2,), [1.0, 2.0])
        self.be.allocate((3,))
        self.be.close()
        self.assertTrue(self.be.closed)
        self.assertEqual(self.be.live_count, 0)
        with self.assertRaises(BackendReleasedError):
            self.be.materialize(x)
        with self.assertRaises(BackendReleasedError):
            self.be.allocate((1,))
        # closing twice is harmless
        self.be.close()

    def test_context_manager_closes(self):
        with self.make_backend() as be:
            be.allocate((2,))
        self.assertTrue(be.closed)

    def test_foreign_payload_rejected(self):
        other = CpuBackend()
        try:
            foreign = other.allocate((2,))
            mine = self.be.allocate((2,))
            with self.assertRaises(BackendMismatchError):
                self.be.add(mine, foreign)
        finally:
            other.close()


class TestCpuBackendContract(_BackendContract, unittest.TestCase):
    def make_backend(self):
        return CpuBackend()

    def test_name(self):
        self.assertEqual(self.be.name, "cpu")


class TestSimulatedCudaBackendContract(_BackendContract, unittest.TestCase):
    def make_backend(self):
        self.executor = SimulatedExecutor()
        return CudaBackend(self.executor)

    def test_name(self):
        self.assertEqual(self.be.name, "cuda")


if __name__ == "__main__":
    unittest.main()
