import math
import unittest

from gradnet.infrastructure.autograd import OpKind, Value


class TestValueForward(unittest.TestCase):
    def test_add_and_mul(self):
        a, b = Value(2.0), Value(-3.0)
        self.assertEqual((a + b).data, -1.0)
        self.assertEqual((a * b).data, -6.0)

    def test_derived_operators(self):
        a, b = Value(6.0), Value(3.0)
        self.assertEqual((a - b).data, 3.0)
        self.assertAlmostEqual((a / b).data, 2.0)
        self.assertEqual((-a).data, -6.0)
        self.assertEqual((a**2).data, 36.0)

    def test_number_operands(self):
        a = Value(2.0)
        self.assertEqual((a + 1).data, 3.0)
        self.assertEqual((1 + a).data, 3.0)
        self.assertEqual((3 * a).data, 6.0)
        self.assertEqual((5 - a).data, 3.0)
        self.assertAlmostEqual((1 / a).data, 0.5)

    def test_coerce(self):
        v = Value(1.0)
        self.assertIs(Value.coerce(v), v)
        self.assertTrue(Value.coerce(2).is_leaf)
        with self.assertRaises(TypeError):
            Value.coerce("2")
        with self.assertRaises(TypeError):
            _ = v + "2"

    def test_op_labels_and_kinds(self):
        a = Value(1.0)
        self.assertEqual((a + a).op, "+")
        self.assertEqual((a * a).kind, OpKind.MUL)
        self.assertEqual(a.tanh().op, "tanh")
        self.assertEqual(a.kind, OpKind.LEAF)

    def test_repr(self):
        self.assertEqual(repr(Value(1.0, label="x")), "Value(x:data=1.0000, grad=0.0000)")

    def test_exp_overflow_saturates(self):
        self.assertEqual(Value(1000.0).exp().data, math.inf)
        self.assertEqual(Value(-1000.0).exp().data, 0.0)

    def test_sigmoid_extremes(self):
        self.assertEqual(Value(-1000.0).sigmoid().data, 0.0)
        self.assertEqual(Value(1000.0).sigmoid().data, 1.0)

    def test_division_by_zero_is_infinite(self):
        self.assertEqual((1 / Value(0.0)).data, math.inf)
        self.assertEqual((Value(1.0) / Value(0.0)).data, math.inf)
        self.assertEqual((Value(-2.0) / Value(0.0)).data, -math.inf)

    def test_fractional_power_of_negative_is_nan(self):
        self.assertTrue(math.isnan((Value(-4.0) ** 0.5).data))


class TestValueBackward(unittest.TestCase):
    def test_chain_rule(self):
        x, y = Value(2.0), Value(3.0)
        z = x * y + x * x
        z.backward()
        self.assertEqual(z.data, 10.0)
        self.assertEqual(x.grad, 7.0)
        self.assertEqual(y.grad, 2.0)

    def test_add_gradients(self):
        a, b = Value(2.0), Value(-3.0)
        (a + b).backward()
        self.assertEqual((a.grad, b.grad), (1.0, 1.0))

    def test_mul_gradients(self):
        a, b = Value(2.0), Value(-3.0)
        (a * b).backward()
        self.assertEqual((a.grad, b.grad), (-3.0, 2.0))

    def test_tanh_at_zero(self):
        x = Value(0.0)
        y = x.tanh()
        y.backward()
        self.assertEqual(y.data, 0.0)
        self.assertEqual(x.grad, 1.0)

    def test_relu(self):
        pos, neg, zero = Value(2.0), Value(-1.0), Value(0.0)
        for v in (pos, neg, zero):
            v.relu().backward()
        self.assertEqual(pos.relu().data, 2.0)
        self.assertEqual(neg.relu().data, 0.0)
        self.assertEqual((pos.grad, neg.grad, zero.grad), (1.0, 0.0, 0.0))

    def test_exp_and_pow(self):
        x = Value(1.5)
        x.exp().backward()
        self.assertAlmostEqual(x.grad, math.exp(1.5))
        x.zero_grad()
        (x**3).backward()
        self.assertAlmostEqual(x.grad, 3 * 1.5**2)

    def test_division_gradient(self):
        a, b = Value(3.0), Value(4.0)
        (a / b).backward()
        self.assertAlmostEqual(a.grad, 0.25)
        self.assertAlmostEqual(b.grad, -3.0 / 16.0)

    def test_sigmoid(self):
        x = Value(0.3)
        s = x.sigmoid()
        s.backward()
        expected = 1.0 / (1.0 + math.exp(-0.3))
        self.assertAlmostEqual(s.data, expected)
        self.assertAlmostEqual(x.grad, expected * (1.0 - expected))

    def test_reused_node_accumulates(self):
        x = Value(3.0)
        (x + x).backward()
        self.assertEqual(x.grad, 2.0)

    def test_second_backward_doubles_leaf_gradients(self):
        x, y = Value(2.0), Value(3.0)
        z = (x * y + x).tanh() * y
        z.backward()
        gx, gy = x.grad, y.grad
        z.backward()
        self.assertAlmostEqual(x.grad, 2 * gx)
        self.assertAlmostEqual(y.grad, 2 * gy)

    def test_zero_grad_resets_graph(self):
        x, y = Value(2.0), Value(3.0)
        z = x * y
        z.backward()
        z.zero_grad()
        self.assertEqual((x.grad, y.grad, z.grad), (0.0, 0.0, 0.0))
        self.assertEqual(z.data, 6.0)

    def test_backward_on_leaf(self):
        x = Value(5.0)
        x.backward()
        self.assertEqual(x.grad, 1.0)

    def test_backward_through_saturated_ops(self):
        x = Value(-1000.0)
        x.sigmoid().backward()
        self.assertIsInstance(x.grad, float)

        y = Value(1000.0)
        y.sigmoid().backward()
        self.assertEqual(y.grad, 0.0)

        z = Value(0.0)
        (1 / z).backward()
        self.assertEqual(z.grad, -math.inf)

    def test_reset_grad_touches_only_that_node(self):
        x, y = Value(2.0), Value(3.0)
        z = x * y
        z.backward()
        x.reset_grad()
        self.assertEqual(x.grad, 0.0)
        self.assertEqual(y.grad, 2.0)
        self.assertEqual(z.grad, 1.0)

    def test_matches_finite_differences(self):
        def f(a, b):
            return ((a * b).tanh() + a**2 / b - b.relu()).sigmoid()

        a0, b0, h = 0.7, 1.3, 1e-6
        a, b = Value(a0), Value(b0)
        f(a, b).backward()
        da = (f(Value(a0 + h), Value(b0)).data - f(Value(a0 - h), Value(b0)).data) / (2 * h)
        db = (f(Value(a0), Value(b0 + h)).data - f(Value(a0), Value(b0 - h)).data) / (2 * h)
        self.assertAlmostEqual(a.grad, da, places=5)
        self.assertAlmostEqual(b.grad, db, places=5)


if __name__ == "__main__":
    unittest.main()
