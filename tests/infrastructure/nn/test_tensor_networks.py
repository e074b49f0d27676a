import unittest

import numpy as np

from gradnet.domain import (
    ArityMismatchError,
    BackendReleasedError,
    InvalidOutputCardinalityError,
)
from gradnet.infrastructure import (
    MLP,
    CpuBackend,
    CudaBackend,
    TensorMLP,
    TensorNeuron,
    TensorValue,
    Value,
)

from tests._simulated_executor import SimulatedExecutor


def _inputs(be, xs):
    return [TensorValue.from_data(be, (1,), [x]) for x in xs]


class _TensorNetworkCases:
    def make_backend(self):
        raise NotImplementedError

    def setUp(self):
        self.be = self.make_backend()

    def tearDown(self):
        self.be.close()

    def test_parameters_live_on_backend(self):
        n = TensorNeuron(3, backend=self.be, rng=np.random.default_rng(0))
        params = n.parameters()
        self.assertEqual(len(params), 4)
        for p in params:
            self.assertIs(p.backend, self.be)
            v = p.data.item()
            self.assertTrue(-1.0 <= v <= 1.0)

    def test_neuron_arity(self):
        n = TensorNeuron(2, backend=self.be)
        with self.assertRaises(ArityMismatchError):
            n.forward(_inputs(self.be, [1.0]))

    def test_mlp_matches_scalar_mlp(self):
        s_net = MLP(2, [3, 1], rng=np.random.default_rng(5))
        t_net = TensorMLP(2, [3, 1], backend=self.be, rng=np.random.default_rng(5))

        xs = [0.4, -0.7]
        s_out = s_net.forward_single([Value(x) for x in xs])
        t_out = t_net.forward_single(_inputs(self.be, xs))
        self.assertAlmostEqual(t_out.data.item(), s_out.data, places=5)

        s_out.backward()
        t_out.backward()
        for sp, tp in zip(s_net.parameters(), t_net.parameters()):
            self.assertAlmostEqual(tp.grad.item(), sp.grad, places=4)

    def test_forward_single_requires_one_output(self):
        net = TensorMLP(1, [2], backend=self.be)
        with self.assertRaises(InvalidOutputCardinalityError):
            net.forward_single(_inputs(self.be, [1.0]))

    def test_zero_grad(self):
        net = TensorMLP(2, [2, 1], backend=self.be, rng=np.random.default_rng(3))
        net.forward_single(_inputs(self.be, [1.0, 2.0])).backward()
        net.zero_grad()
        for p in net.parameters():
            self.assertEqual(p.grad.item(), 0.0)

    def test_close_releases_parameters(self):
        net = TensorMLP(2, [2, 1], backend=self.be)
        params = net.parameters()
        net.close()
        self.assertFalse(self.be.closed)
        for p in params:
            with self.assertRaises(BackendReleasedError):
                p.data.item()


class TestCpuTensorNetworks(_TensorNetworkCases, unittest.TestCase):
    def make_backend(self):
        return CpuBackend()


class TestSimulatedCudaTensorNetworks(_TensorNetworkCases, unittest.TestCase):
    def make_backend(self):
        return CudaBackend(SimulatedExecutor())


class TestDefaultBackend(unittest.TestCase):
    def test_uses_default_backend(self):
        from gradnet.infrastructure.backends import default_backend

        net = TensorMLP(1, [1])
        try:
            self.assertIs(net.backend, default_backend())
        finally:
            net.close()


if __name__ == "__main__":
    unittest.main()
