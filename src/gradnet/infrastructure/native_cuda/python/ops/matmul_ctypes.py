from __future__ import annotations

from ctypes import c_int, c_void_p

from ._symbols import bind_symbol, check_status


# int gradnet_cuda_matmul_f32(const float* A, const float* B, float* C, int M, int N, int K)
# A: (M, K), B: (K, N), C: (M, N), all row-major.
def matmul_cuda(
    lib, *, a_dev: int, b_dev: int, c_dev: int, M: int, N: int, K: int
) -> None:
    M_i, N_i, K_i = int(M), int(N), int(K)
    if M_i <= 0 or N_i <= 0 or K_i <= 0:
        raise ValueError(f"matmul_cuda invalid dims: M={M_i}, N={N_i}, K={K_i}")

    sym = "gradnet_cuda_matmul_f32"
    fn = bind_symbol(
        lib, sym, [c_void_p, c_void_p, c_void_p, c_int, c_int, c_int]
    )
    st = fn(
        c_void_p(int(a_dev)),
        c_void_p(int(b_dev)),
        c_void_p(int(c_dev)),
        c_int(M_i),
        c_int(N_i),
        c_int(K_i),
    )
    check_status(sym, st)
