"""
ctypes bindings for the elementwise CUDA kernels.

The native library exports float32 C ABI functions of the form::

    int gradnet_cuda_add_f32(const float* a, const float* b, float* y, int n)
    int gradnet_cuda_mul_f32(const float* a, const float* b, float* y, int n)
    int gradnet_cuda_tanh_f32(const float* x, float* y, int n)
    int gradnet_cuda_relu_f32(const float* x, float* y, int n)
    int gradnet_cuda_sgd_update_f32(float* x, const float* g, float lr, int n)

Device pointers are passed as `c_void_p` built from Python ints. Kernels are
launched asynchronously; callers synchronize.
"""

from __future__ import annotations

from ctypes import c_float, c_int, c_void_p

from ._symbols import bind_symbol, check_status


def _binary(lib, sym: str, a_dev: int, b_dev: int, y_dev: int, numel: int) -> None:
    fn = bind_symbol(lib, sym, [c_void_p, c_void_p, c_void_p, c_int])
    st = fn(
        c_void_p(int(a_dev)),
        c_void_p(int(b_dev)),
        c_void_p(int(y_dev)),
        c_int(int(numel)),
    )
    check_status(sym, st)


def _unary(lib, sym: str, x_dev: int, y_dev: int, numel: int) -> None:
    fn = bind_symbol(lib, sym, [c_void_p, c_void_p, c_int])
    st = fn(c_void_p(int(x_dev)), c_void_p(int(y_dev)), c_int(int(numel)))
    check_status(sym, st)


def add_cuda(lib, *, a_dev: int, b_dev: int, y_dev: int, numel: int) -> None:
    """Launch ``y = a + b`` over `numel` float32 elements."""
    _binary(lib, "gradnet_cuda_add_f32", a_dev, b_dev, y_dev, numel)


def mul_cuda(lib, *, a_dev: int, b_dev: int, y_dev: int, numel: int) -> None:
    """Launch ``y = a * b`` over `numel` float32 elements."""
    _binary(lib, "gradnet_cuda_mul_f32", a_dev, b_dev, y_dev, numel)


def tanh_cuda(lib, *, x_dev: int, y_dev: int, numel: int) -> None:
    _unary(lib, "gradnet_cuda_tanh_f32", x_dev, y_dev, numel)


def relu_cuda(lib, *, x_dev: int, y_dev: int, numel: int) -> None:
    _unary(lib, "gradnet_cuda_relu_f32", x_dev, y_dev, numel)


def sgd_update_cuda(lib, *, x_dev: int, g_dev: int, lr: float, numel: int) -> None:
    """Launch ``x -= lr * g`` in place over `numel` float32 elements."""
    sym = "gradnet_cuda_sgd_update_f32"
    fn = bind_symbol(lib, sym, [c_void_p, c_void_p, c_float, c_int])
    st = fn(
        c_void_p(int(x_dev)),
        c_void_p(int(g_dev)),
        c_float(float(lr)),
        c_int(int(numel)),
    )
    check_status(sym, st)


__all__ = ["add_cuda", "mul_cuda", "tanh_cuda", "relu_cuda", "sgd_update_cuda"]
