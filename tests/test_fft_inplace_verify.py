import numpy as np
import pytest

import fft_inplace_verify as verify


def test_are_float_equal():
    assert verify.are_float_equal(1.0, 1.0005)
    assert not verify.are_float_equal(1.0, 1.002)
    assert verify.are_float_equal(1.0, 1.02, eps=0.05)
    assert verify.are_float_equal(float("inf"), float("inf"))


def test_epsilon_for():
    assert verify.epsilon_for(256) == 0.001
    assert verify.epsilon_for(512) == 0.05


def test_make_step_signal():
    real, imag = verify.make_step_signal(16)
    assert real.dtype == np.float32
    # 0.5 + cos(0) + sin(0) + cos(0)
    assert real[0] == pytest.approx(2.5)
    assert not imag.any()


def test_check_all():
    assert verify.check_all()


@pytest.mark.parametrize("n", [8, 16, 32, 128, 256])
def test_check_step(n):
    assert verify.check_step(n)


def test_check_step_repeated_passes():
    assert verify.check_step(16, direct_count=3, inverse_count=2)


@pytest.mark.parametrize("n", [4, 64, 1024, 16384])
def test_check_zeros(n):
    assert verify.check_zeros(n)


@pytest.mark.parametrize("pos", [0, 1, 7, 100, 255])
def test_check_pulse(pos):
    assert verify.check_pulse(256, pulse_pos=pos)


def test_invalid_harness_calls_fail():
    assert not verify.check_step(16, direct_count=0)
    assert not verify.check_zeros(16, direct_count=-1)
    assert not verify.check_pulse(16, pulse_pos=-1)
    assert not verify.check_pulse(16, pulse_pos=16)
    assert not verify.check_step(4)


def test_unsupported_size_fails():
    assert not verify.check_zeros(12)
    assert not verify.check_step(32768)


def test_log_output(capsys):
    assert verify.check_step(16, log=True)
    assert verify.check_pulse(256, log=True, pulse_pos=7)
    out = capsys.readouterr().out
    assert "check_step:[16]:OK" in out
    assert "check_pulse:[256,7]:OK" in out


def test_verbose_tables(capsys):
    assert verify.check_zeros(4, verbose=True)
    out = capsys.readouterr().out
    assert "check_zeros:Source[4]:" in out
    assert "check_zeros:FFT[4]:" in out
    assert "check_zeros:Inverse[4]:" in out


def test_speed_256():
    assert verify.speed_256(5)


def test_speed_4096():
    assert verify.speed_4096(2)


def test_benchmark_returns_time():
    elapsed = verify.benchmark(64, num_runs=3)
    assert elapsed > 0.0


def test_benchmark_rejects_bad_size():
    with pytest.raises(ValueError):
        verify.benchmark(100, num_runs=1)


def test_main_check(capsys):
    assert verify.main(["check", "-v"]) == 0
    out = capsys.readouterr().out
    assert "check_zeros:[256]:OK" in out
    assert "check_step:[8]:OK" in out
    assert "All checks passed" in out


def test_main_benchmark(capsys):
    assert verify.main(["benchmark", "--sizes", "16", "64", "--num-runs", "2"]) == 0
    out = capsys.readouterr().out
    assert "Benchmark FFT - Sequence length 64" in out


def test_main_benchmark_bad_size(capsys):
    assert verify.main(["benchmark", "--sizes", "6"]) == 1
    assert "must be a power of 2" in capsys.readouterr().out


def test_main_speed(capsys):
    assert verify.main(["speed", "--count", "2"]) == 0
    out = capsys.readouterr().out
    assert "FFT 256 x 2:" in out
    assert "FFT 4096 x 2:" in out
    assert "FAIL" not in out
