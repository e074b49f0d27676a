import unittest

from gradnet.infrastructure.autograd import (
    AddRule,
    MulRule,
    OpKind,
    Value,
    iter_reachable,
    topological_order,
)


class TestTopologicalOrder(unittest.TestCase):
    def test_children_before_parents(self):
        a, b = Value(1.0, label="a"), Value(2.0, label="b")
        c = a * b
        d = c + a
        order = topological_order(d)
        pos = {id(n): i for i, n in enumerate(order)}
        self.assertIs(order[-1], d)
        self.assertLess(pos[id(c)], pos[id(d)])
        self.assertLess(pos[id(a)], pos[id(c)])
        self.assertLess(pos[id(b)], pos[id(c)])

    def test_diamond_visits_shared_node_once(self):
        x = Value(2.0)
        s = x * x
        left = s + 1.0
        right = s * 3.0
        top = left + right
        order = topological_order(top)
        self.assertEqual(sum(1 for n in order if n is s), 1)
        self.assertEqual(sum(1 for n in order if n is x), 1)
        self.assertEqual(len(order), len(set(map(id, order))))

    def test_diamond_gradient(self):
        x = Value(2.0)
        s = x * x
        top = (s + 1.0) + s * 3.0
        top.backward()
        # d/dx (x^2 + 1 + 3x^2) = 8x
        self.assertEqual(x.grad, 16.0)

    def test_deep_chain_has_no_recursion_limit(self):
        x = Value(1.0)
        y = x
        for _ in range(5000):
            y = y + 1.0
        self.assertEqual(len(topological_order(y)), 1 + 2 * 5000)
        y.backward()
        self.assertEqual(x.grad, 1.0)

    def test_iter_reachable_each_node_once(self):
        x = Value(1.0)
        y = x * x + x
        nodes = list(iter_reachable(y))
        self.assertEqual(len(nodes), len(set(map(id, nodes))))
        self.assertIn(x, nodes)


class TestRules(unittest.TestCase):
    def test_children_are_deduplicated(self):
        x = Value(3.0)
        y = x * x
        self.assertEqual(y.children, (x,))
        self.assertIsInstance(y.rule, MulRule)
        self.assertEqual(y.rule.inputs, (x, x))

    def test_rules_are_tagged(self):
        a, b = Value(1.0), Value(2.0)
        self.assertIsInstance((a + b).rule, AddRule)
        self.assertEqual((a + b).rule.kind, OpKind.ADD)
        self.assertIsNone(a.rule)
        self.assertTrue(a.is_leaf)

    def test_local_backward_applies_once(self):
        a, b = Value(2.0), Value(5.0)
        c = a * b
        c.grad = 1.0
        c.local_backward()
        self.assertEqual((a.grad, b.grad), (5.0, 2.0))

    def test_local_backward_on_leaf_is_noop(self):
        a = Value(1.0)
        a.grad = 4.0
        a.local_backward()
        self.assertEqual(a.grad, 4.0)

    def test_shared_subgraph_across_terminals(self):
        x = Value(2.0)
        h = x * x
        y1 = h + 1.0
        y2 = h * 2.0
        y1.backward()
        y2.backward()
        # 2x + 4x
        self.assertEqual(x.grad, 12.0)


if __name__ == "__main__":
    unittest.main()
