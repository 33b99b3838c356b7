"""
Verification and throughput harness for the in-place FFT.

Feeds synthetic signals with a known spectrum through fft_inplace.transform and
checks the result, then optionally runs the inverse and checks the round trip.

Usage:
  python fft_inplace_verify.py check -v
  python fft_inplace_verify.py speed --count 100
  python fft_inplace_verify.py benchmark --sizes 256 4096 --num-runs 200
"""
import argparse
import math
import sys
import time

import numpy as np

import fft_inplace

# Test sizes for the throughput loops
speed_sizes = [256, 4096]


def are_float_equal(a, b, eps=0.001):
    return abs(float(a) - float(b)) < eps or a == b


def epsilon_for(n):
    # recursive twiddles lose precision on long transforms
    return 0.001 if n <= 256 else 0.05


def make_step_signal(n):
    """DC + 1st harmonic + 2nd harmonic (sin) + 3rd harmonic, one period over n samples."""
    t = 2 * math.pi / n * np.arange(n)
    real = 0.5 + np.cos(t) + np.sin(2 * t) + np.cos(3 * t)
    return real.astype(np.float32), np.zeros(n, dtype=np.float32)


def make_pulse_signal(n, pulse_pos=0):
    real = np.zeros(n, dtype=np.float32)
    real[pulse_pos] = 1.0
    return real, np.zeros(n, dtype=np.float32)


def _print_table(prefix, title, real, imag, src_real=None, src_imag=None):
    print(f"{prefix}{title}[{len(real)}]:")
    for i in range(len(real)):
        power = real[i] * real[i] + imag[i] * imag[i]
        line = f"{prefix}{real[i]:10.6f}  {imag[i]:10.6f}  {power:10.6f}"
        if src_real is not None:
            line += f" |-| {real[i] - src_real[i]:10.6f}  {imag[i] - src_imag[i]:10.6f}"
        print(line)


def _forward(src_real, src_imag, direct_count):
    # every pass starts again from the source, only the last result is kept
    for _ in range(direct_count):
        fft_r = src_real.copy()
        fft_i = src_imag.copy()
        if not fft_inplace.transform(fft_r, fft_i, len(src_real), True):
            return None, None
    return fft_r, fft_i


def _round_trip_ok(src_real, src_imag, fft_r, fft_i, inverse_count, eps, prefix, verbose):
    out_r, out_i = fft_r, fft_i
    for _ in range(inverse_count):
        out_r = fft_r.copy()
        out_i = fft_i.copy()
        if not fft_inplace.transform(out_r, out_i, len(fft_r), False):
            return False

    if verbose:
        _print_table(prefix, "Inverse", out_r, out_i, src_real, src_imag)

    ok = True
    for i in range(len(src_real)):
        if not are_float_equal(src_real[i], out_r[i], eps):
            ok = False
        if not are_float_equal(src_imag[i], out_i[i], eps):
            ok = False
    return ok


def _report(prefix, label, ok, log):
    if log:
        print(f"{prefix}[{label}]:{'OK' if ok else 'FAIL'}")


def check_step(n, log=False, direct_count=1, inverse_count=1, verbose=False):
    """
    Known harmonic decomposition of make_step_signal:
      bin 0        0.5 * n
      bins 1, n-1  0.5 * n
      bins 2, n-2  imag -0.5 * n, +0.5 * n
      bins 3, n-3  0.5 * n
      all other bins ~0
    """
    prefix = "check_step:"
    if direct_count <= 0:
        return False
    # harmonics 1..3 and their mirrors need distinct bins
    if n < 8:
        return False
    eps = epsilon_for(n)
    half = 0.5 * n

    src_r, src_i = make_step_signal(n)
    if verbose:
        _print_table(prefix, "Source", src_r, src_i)

    fft_r, fft_i = _forward(src_r, src_i, direct_count)
    if fft_r is None:
        _report(prefix, n, False, log)
        return False
    if verbose:
        _print_table(prefix, "FFT", fft_r, fft_i)

    expected_r = np.zeros(n)
    expected_i = np.zeros(n)
    expected_r[0] = half
    expected_r[1] = half
    expected_r[n - 1] = half
    expected_i[2] = -half
    expected_i[n - 2] = half
    expected_r[3] = half
    expected_r[n - 3] = half

    ok = True
    for i in range(n):
        if not are_float_equal(fft_r[i], expected_r[i], eps):
            ok = False
        if not are_float_equal(fft_i[i], expected_i[i], eps):
            ok = False

    if inverse_count > 0:
        if not _round_trip_ok(src_r, src_i, fft_r, fft_i, inverse_count, eps, prefix, verbose):
            ok = False

    _report(prefix, n, ok, log)
    return ok


def check_zeros(n, log=False, direct_count=1, inverse_count=1, verbose=False):
    prefix = "check_zeros:"
    if direct_count <= 0:
        return False
    eps = epsilon_for(n)

    src_r = np.zeros(n, dtype=np.float32)
    src_i = np.zeros(n, dtype=np.float32)
    if verbose:
        _print_table(prefix, "Source", src_r, src_i)

    fft_r, fft_i = _forward(src_r, src_i, direct_count)
    if fft_r is None:
        _report(prefix, n, False, log)
        return False
    if verbose:
        _print_table(prefix, "FFT", fft_r, fft_i)

    ok = True
    for i in range(n):
        if not are_float_equal(fft_r[i], 0.0, eps):
            ok = False
        if not are_float_equal(fft_i[i], 0.0, eps):
            ok = False

    if inverse_count > 0:
        if not _round_trip_ok(src_r, src_i, fft_r, fft_i, inverse_count, eps, prefix, verbose):
            ok = False

    _report(prefix, n, ok, log)
    return ok


def check_pulse(n, log=False, pulse_pos=0, direct_count=1, inverse_count=1, verbose=False):
    """A unit pulse has a flat unit-magnitude spectrum, phase-shifted by its position."""
    prefix = "check_pulse:"
    if direct_count <= 0:
        return False
    if pulse_pos < 0 or pulse_pos >= n:
        return False
    eps = epsilon_for(n)
    label = n if pulse_pos == 0 else f"{n},{pulse_pos}"

    src_r, src_i = make_pulse_signal(n, pulse_pos)
    if verbose:
        _print_table(prefix, "Source", src_r, src_i)

    fft_r, fft_i = _forward(src_r, src_i, direct_count)
    if fft_r is None:
        _report(prefix, label, False, log)
        return False
    if verbose:
        _print_table(prefix, "FFT", fft_r, fft_i)

    ok = True
    for i in range(n):
        phase = -2 * math.pi * i * pulse_pos / n
        if not are_float_equal(fft_r[i], math.cos(phase), eps):
            ok = False
        if not are_float_equal(fft_i[i], math.sin(phase), eps):
            ok = False
        # magnitude is 1 on every bin
        if not are_float_equal(fft_r[i] * fft_r[i] + fft_i[i] * fft_i[i], 1.0, eps):
            ok = False

    if inverse_count > 0:
        if not _round_trip_ok(src_r, src_i, fft_r, fft_i, inverse_count, eps, prefix, verbose):
            ok = False

    _report(prefix, label, ok, log)
    return ok


def check_all(log=False, verbose=False):
    ok = True

    if not check_zeros(256, log, verbose=verbose):
        ok = False
    for pos in (0, 1, 7):
        if not check_pulse(256, log, pos, verbose=verbose):
            ok = False

    for n in (8, 16, 256):
        if not check_step(n, log, verbose=verbose):
            ok = False

    return ok


def speed_256(direct_count=1):
    return check_step(256, False, direct_count, 0)


def speed_4096(direct_count=1):
    return check_step(4096, False, direct_count, 0)


def benchmark(n, num_runs=100, verbose=False):
    """
    Average seconds per forward transform of a random complex signal.

    Also times numpy.fft.fft on the same data and reports the max error
    against it when verbose.
    """
    x = np.random.randn(n) + 1j * np.random.randn(n)
    src_r = x.real.astype(np.float32)
    src_i = x.imag.astype(np.float32)
    real = src_r.copy()
    imag = src_i.copy()

    # Warmup (first call compiles the kernels)
    if not fft_inplace.transform(real, imag, n):
        raise ValueError(f"Sequence length is {n}, not a supported FFT size")

    start = time.time()
    for _ in range(num_runs):
        real[:] = src_r
        imag[:] = src_i
        fft_inplace.transform(real, imag, n)
    time_fft = (time.time() - start) / num_runs

    start = time.time()
    for _ in range(num_runs):
        result_ref = np.fft.fft(x)
    time_ref = (time.time() - start) / num_runs

    if verbose:
        error = np.max(np.abs((real + 1j * imag) - result_ref))
        print(f"Benchmark FFT - Sequence length {n}")
        print("=" * 60)
        print(f"  In-place FFT time: {time_fft*1000:.3f} ms")
        print(f"  NumPy FFT time:    {time_ref*1000:.3f} ms")
        print(f"  Error:             {error:.2e}")
        print()

    return time_fft


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Verification and throughput harness for the in-place FFT',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s check -v                     # Run all signal checks, one line per case
  %(prog)s check -v --dump              # Also print source, spectrum and inverse tables
  %(prog)s speed --count 1000           # Forward FFT loops at 256 and 4096 points
  %(prog)s benchmark --sizes 64 1024    # Compare against numpy.fft
        """)

    parser.add_argument('mode', choices=['check', 'speed', 'benchmark'],
                        help='Which harness to run')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log each check result')
    parser.add_argument('--dump', action='store_true',
                        help='Print full signal and spectrum tables (check mode)')
    parser.add_argument('--count', type=int, default=1,
                        help='Forward transforms per size in speed mode (default: 1)')
    parser.add_argument('--sizes', type=int, nargs='+', default=speed_sizes,
                        help='Transform sizes for benchmark mode (default: 256 4096)')
    parser.add_argument('--num-runs', type=int, default=100,
                        help='Timing runs per size in benchmark mode (default: 100)')

    args = parser.parse_args(argv)

    if args.mode == 'check':
        ok = check_all(log=args.verbose, verbose=args.dump)
        print("All checks passed" if ok else "Checks failed")
        return 0 if ok else 1

    if args.mode == 'speed':
        ok = True
        for n, speed_test in zip(speed_sizes, (speed_256, speed_4096)):
            start = time.time()
            passed = speed_test(args.count)
            elapsed = time.time() - start
            print(f"FFT {n} x {args.count}: {elapsed*1000:.2f} ms, {'OK' if passed else 'FAIL'}")
            if not passed:
                ok = False
        return 0 if ok else 1

    for n in args.sizes:
        if not fft_inplace.is_power_of_two(n) or not (
                fft_inplace.FFT_BLOCK_MIN_SIZE <= n <= fft_inplace.FFT_BLOCK_MAX_SIZE):
            print(f"Error: N={n} must be a power of 2 in "
                  f"[{fft_inplace.FFT_BLOCK_MIN_SIZE}, {fft_inplace.FFT_BLOCK_MAX_SIZE}]")
            return 1
        benchmark(n, args.num_runs, verbose=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
