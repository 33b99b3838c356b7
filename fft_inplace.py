"""
An in-place radix-2 decimation-in-time (DIT) form of the Cooley–Tukey algorithm
over split real/imaginary float32 buffers.

The butterflies run first, leaving the spectrum in bit-reversed order, and a
bit-reversal permutation then restores natural order. Twiddle factors are
generated recursively from a small constant table, so no trigonometric call
happens inside the hot loop.

Supported lengths: N = 4, 8, ..., 16384 (LogN = 2 .. 14).

After a forward transform of one period of a periodic signal:
  Re[0]          DC * N (Im[0] is 0)
  Re[k] / Im[k]  k-th harmonic cos / sin part, amplitude * N / 2
  Re[N-k]        mirror of bin k (Im[N-k] has the opposite sign)

Ref: https://en.wikipedia.org/wiki/Cooley%E2%80%93Tukey_FFT_algorithm
"""
import math

import numpy as np
from numba import njit

debug = False

FFT_BLOCK_MIN_SIZE = 4
FFT_BLOCK_MAX_SIZE = 16384
FFT_LOG_MIN = 2
FFT_LOG_MAX = 14

# Half-angle rotation per stage depth k:
#   RCOEF[k] = cos(pi / 2^k), ICOEF[k] = -sin(pi / 2^k)
# k = 0 and k = 1 hold the exact values (-1, 0) and (0, -1).
RCOEF = np.array([
    -1.0000000000000000, 0.0000000000000000, 0.7071067811865475,
    0.9238795325112867, 0.9807852804032304, 0.9951847266721969,
    0.9987954562051724, 0.9996988186962042, 0.9999247018391445,
    0.9999811752826011, 0.9999952938095761, 0.9999988234517018,
    0.9999997058628822, 0.9999999264657178,
], dtype=np.float32)
ICOEF = np.array([
    0.0000000000000000, -1.0000000000000000, -0.7071067811865474,
    -0.3826834323650897, -0.1950903220161282, -0.0980171403295606,
    -0.0490676743274180, -0.0245412285229122, -0.0122715382857199,
    -0.0061358846491544, -0.0030679567629659, -0.0015339801862847,
    -0.0007669903187427, -0.0003834951875714,
], dtype=np.float32)
RCOEF.flags.writeable = False
ICOEF.flags.writeable = False


def is_power_of_two(x):
    # x = 2^k, k >= 1
    return x > 1 and (x & (x - 1)) == 0


def log2_int(x):
    """Exact base-2 logarithm of a 32-bit power of two, -1 for anything else."""
    for i in range(32):
        if x == 1 << i:
            return i
    return -1


def _check_buffer(name, buf):
    if not isinstance(buf, np.ndarray):
        raise ValueError(f"{name} buffer must be a numpy array, got {type(buf).__name__}")
    if buf.dtype != np.float32:
        raise ValueError(f"{name} buffer dtype is {buf.dtype}, must be float32")
    if buf.ndim != 1:
        raise ValueError(f"{name} buffer has {buf.ndim} dimensions, must be 1")
    if not buf.flags.writeable:
        raise ValueError(f"{name} buffer is read-only")


def check_parameters(real, imag, n):
    """
    Validate one transform call before any data is touched.

    Parameters:
    -----------
    real, imag : ndarray
        1-D writeable float32 buffers of length n
    n : int
        Transform length, power of 2 in [4, 16384]

    Returns:
    --------
    log_n : int
        Number of butterfly stages

    Raises ValueError naming the first violated rule.
    """
    if real is None or imag is None:
        raise ValueError("Real and imaginary buffers must not be None")
    _check_buffer("Real", real)
    _check_buffer("Imaginary", imag)
    if np.may_share_memory(real, imag):
        raise ValueError("Real and imaginary buffers must not overlap")

    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise ValueError(f"Sequence length must be an integer, got {type(n).__name__}")
    n = int(n)
    if n < FFT_BLOCK_MIN_SIZE or n > FFT_BLOCK_MAX_SIZE:
        raise ValueError(
            f"Sequence length is {n}, must be in [{FFT_BLOCK_MIN_SIZE}, {FFT_BLOCK_MAX_SIZE}]")
    if not is_power_of_two(n):
        raise ValueError(f"Sequence length is {n}, must be a power of 2")
    log_n = log2_int(n)
    if log_n < FFT_LOG_MIN or log_n > FFT_LOG_MAX:
        raise ValueError(f"Stage count is {log_n}, must be in [{FFT_LOG_MIN}, {FFT_LOG_MAX}]")

    if len(real) != n or len(imag) != n:
        raise ValueError(
            f"Buffer lengths are {len(real)} and {len(imag)}, both must equal {n}")
    return log_n


# Cooley-Tukey DIT butterflies, one stage per halving of the block extent
# [a   b   c   d   e   f   g   h]   ie = 8, in = 4: pairs (a,e) (b,f) (c,g) (d,h)
# [a   b   c   d] [e   f   g   h]   ie = 4, in = 2: pairs (a,c) (b,d) (e,g) (f,h)
# [a   b] [c   d] [e   f] [g   h]   ie = 2, in = 1
# Output is left in bit-reversed order.
#
@njit
def butterfly_stages(real, imag, n, log_n, is_forward, direct_twiddles):
    ie = n
    for stage in range(1, log_n + 1):
        # rotation base of this stage: e^(-i*pi/in), conjugated for inverse
        rw = RCOEF[log_n - stage]
        iw = ICOEF[log_n - stage]
        if not is_forward:
            iw = -iw
        half = ie >> 1

        ru = np.float32(1.0)
        iu = np.float32(0.0)
        for j in range(half):
            if direct_twiddles:
                angle = math.pi * j / half
                ru = np.float32(math.cos(angle))
                if is_forward:
                    iu = np.float32(-math.sin(angle))
                else:
                    iu = np.float32(math.sin(angle))

            for i in range(j, n, ie):
                io = i + half

                # sum stays, difference is rotated by (ru, iu)
                rtp = real[i] + real[io]
                itp = imag[i] + imag[io]
                rtq = real[i] - real[io]
                itq = imag[i] - imag[io]
                real[io] = rtq * ru - itq * iu
                imag[io] = itq * ru + rtq * iu
                real[i] = rtp
                imag[i] = itp

            if not direct_twiddles:
                # (ru, iu) *= (rw, iw)
                sr = ru
                ru = ru * rw - iu * iw
                iu = iu * rw + sr * iw

        ie >>= 1


# Bit-reversal with an incremental mirrored counter j (1-based).
# For N = 8:
# 000 001 010 011 100 101 110 111 -> 000 100 010 110 001 101 011 111
#
@njit
def bit_reverse(real, imag, n):
    nn = n >> 1
    j = 1
    for i in range(1, n):
        if i < j:
            # swap each pair once, fixed points stay
            io = i - 1
            jo = j - 1
            rtp = real[jo]
            itp = imag[jo]
            real[jo] = real[io]
            imag[jo] = imag[io]
            real[io] = rtp
            imag[io] = itp

        # add one to the mirrored counter: carry runs from the top bit down
        k = nn
        while k < j:
            j -= k
            k >>= 1
        j += k


@njit
def normalize(real, imag, n):
    scale = np.float32(1.0) / np.float32(n)
    for i in range(n):
        real[i] *= scale
        imag[i] *= scale


def _run(real, imag, n, log_n, is_forward, direct_twiddles):
    if debug:
        direction = "forward" if is_forward else "inverse"
        print(f"FFT length: {n}, Stages: {log_n}, Direction: {direction}")

    butterfly_stages(real, imag, n, log_n, is_forward, direct_twiddles)
    bit_reverse(real, imag, n)
    if not is_forward:
        normalize(real, imag, n)


def transform(real, imag, n, is_forward=True, direct_twiddles=False):
    """
    In-place FFT of the complex signal real + 1j * imag.

    Parameters:
    -----------
    real, imag : ndarray
        1-D writeable float32 buffers of length n, overwritten with the result
    n : int
        Transform length, power of 2 in [4, 16384]
    is_forward : bool
        True for signal to spectrum, False for spectrum to signal (scaled by 1/n)
    direct_twiddles : bool
        Evaluate every twiddle factor with cos/sin instead of the recursive
        rotation (more accurate, slower)

    Returns:
    --------
    success : bool
        False on a parameter error, in which case the buffers are untouched
    """
    try:
        log_n = check_parameters(real, imag, n)
    except ValueError as e:
        if debug:
            print(f"FFT rejected: {e}")
        return False

    _run(real, imag, int(n), log_n, bool(is_forward), bool(direct_twiddles))
    return True


def _transform_copy(x, is_forward, direct_twiddles):
    x = np.asarray(x)
    if x.ndim != 1:
        raise ValueError(f"Sequence has {x.ndim} dimensions, must be 1")

    n = len(x)
    real = np.array(x.real, dtype=np.float32)
    if np.iscomplexobj(x):
        imag = np.array(x.imag, dtype=np.float32)
    else:
        imag = np.zeros(n, dtype=np.float32)

    log_n = check_parameters(real, imag, n)
    _run(real, imag, n, log_n, is_forward, bool(direct_twiddles))

    result = np.empty(n, dtype=np.complex64)
    result.real = real
    result.imag = imag
    return result


def fft(x, direct_twiddles=False):
    """
    Forward FFT of a 1-D sequence, returned as a new complex64 array.

    The input is copied; raises ValueError if its length is not supported.
    """
    return _transform_copy(x, True, direct_twiddles)


def ifft(x, direct_twiddles=False):
    """Inverse FFT of a 1-D sequence, returned as a new complex64 array."""
    return _transform_copy(x, False, direct_twiddles)
