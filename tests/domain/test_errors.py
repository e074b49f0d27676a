import unittest

from gradnet.domain import (
    ArityMismatchError,
    BackendMismatchError,
    BackendReleasedError,
    BackendUnavailableError,
    DimensionMismatchError,
    InvalidOutputCardinalityError,
    RankError,
    ShapeError,
    ShapeMismatchError,
)


class TestErrorHierarchy(unittest.TestCase):
    def test_shape_errors_are_value_errors(self):
        for cls in (ShapeMismatchError, RankError, DimensionMismatchError):
            self.assertTrue(issubclass(cls, ShapeError))
        self.assertTrue(issubclass(ShapeError, ValueError))
        self.assertTrue(issubclass(ArityMismatchError, ValueError))

    def test_backend_errors_are_runtime_errors(self):
        for cls in (
            BackendMismatchError,
            BackendUnavailableError,
            BackendReleasedError,
            InvalidOutputCardinalityError,
        ):
            self.assertTrue(issubclass(cls, RuntimeError))


class TestErrorAttributes(unittest.TestCase):
    def test_shape_mismatch_keeps_shapes(self):
        e = ShapeMismatchError("add", (2, 3), (3, 2))
        self.assertEqual(e.op, "add")
        self.assertEqual(e.shape_a, (2, 3))
        self.assertEqual(e.shape_b, (3, 2))
        self.assertIn("add", str(e))

    def test_rank_error_keeps_rank(self):
        e = RankError("matmul", 3)
        self.assertEqual(e.rank, 3)
        self.assertEqual(e.expected, 2)

    def test_dimension_mismatch_message(self):
        e = DimensionMismatchError((2, 3), (4, 2))
        self.assertIn("Cannot multiply", str(e))

    def test_arity_message(self):
        e = ArityMismatchError(3, 2)
        self.assertEqual((e.expected, e.got), (3, 2))
        self.assertIn("Expected 3 inputs, got 2", str(e))

    def test_cardinality_message(self):
        e = InvalidOutputCardinalityError(2)
        self.assertEqual(e.got, 2)
        self.assertIn("Expected single output, got 2", str(e))

    def test_unavailable_reason(self):
        e = BackendUnavailableError("cuda", "no device")
        self.assertEqual(e.backend, "cuda")
        self.assertEqual(e.reason, "no device")
        self.assertIn("no device", str(e))
        self.assertIsNone(BackendUnavailableError("cuda").reason)


if __name__ == "__main__":
    unittest.main()
