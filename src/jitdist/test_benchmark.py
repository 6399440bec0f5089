import os
import numpy as np
import pytest

from jitdist import benchmark
from jitdist.benchmark import (IMPLEMENTATIONS, RESULT_COLUMNS, generate_data, time_implementation,
                               resolve_implementations, run_benchmark, save_results, combine_results)
from jitdist.config import get_output_dir, configure_threads
from jitdist import cli
from jitdist.cli import main


def test_generate_data_is_seeded():
    a = generate_data(10, 3, seed=1)
    b = generate_data(10, 3, seed=1)
    assert a.shape == (10, 3)
    assert np.array_equal(a, b)
    assert np.all((a >= 0.0) & (a < 1.0))


def test_generate_data_rejects_bad_shape():
    with pytest.raises(ValueError):
        generate_data(10, 0)


def test_time_implementation_counts_runs():
    times = time_implementation(lambda X: X.sum(), np.ones((2, 2)), num_runs=3)
    assert isinstance(times, list)
    assert len(times) == 3
    assert all(t >= 0.0 for t in times)
    with pytest.raises(ValueError):
        time_implementation(lambda X: X, np.ones((2, 2)), num_runs=0)


def test_resolve_implementations_keeps_registry_order():
    assert resolve_implementations() == list(IMPLEMENTATIONS)
    assert resolve_implementations(['numba', 'numpy', 'numba']) == ['numpy', 'numba']
    with pytest.raises(ValueError):
        resolve_implementations(['numpy', 'fortran'])


def test_run_benchmark_all_implementations():
    results = run_benchmark(n_samples=30, n_features=5, num_runs=2, seed=0)
    assert list(results.columns) == RESULT_COLUMNS
    assert results['implementation'].tolist() == list(IMPLEMENTATIONS)
    assert results['matches_reference'].all()
    assert (results['n_samples'] == 30).all()
    python_row = results[results['implementation'] == 'python'].iloc[0]
    assert python_row['speedup'] == pytest.approx(1.0)


def test_run_benchmark_without_python_uses_slowest_baseline():
    results = run_benchmark(num_runs=1, implementations=['numpy', 'numba'], X=generate_data(20, 4, seed=2))
    assert results['speedup'].min() == pytest.approx(1.0)


def test_run_benchmark_flags_mismatch(monkeypatch):
    monkeypatch.setitem(benchmark.IMPLEMENTATIONS, 'scipy', lambda X: np.zeros((X.shape[0], X.shape[0])))
    results = run_benchmark(n_samples=10, n_features=3, num_runs=1, implementations=['numpy', 'scipy'], seed=0)
    assert results.set_index('implementation')['matches_reference'].to_dict() == {'numpy': True, 'scipy': False}


def test_save_and_combine_results(tmp_path):
    first = run_benchmark(n_samples=10, n_features=3, num_runs=1, implementations=['numpy', 'scipy'], seed=0)
    second = run_benchmark(n_samples=12, n_features=3, num_runs=1, implementations=['numba'], seed=1)
    path = save_results(first, str(tmp_path), run_id='a')
    save_results(second, str(tmp_path), run_id='b')
    assert os.path.exists(path)

    combined = combine_results(str(tmp_path))
    assert len(combined) == 3
    assert combined['run_id'].tolist() == ['a', 'a', 'b']
    assert combined['implementation'].tolist() == ['numpy', 'scipy', 'numba']


def test_combine_results_empty_dir(tmp_path):
    with pytest.raises(ValueError):
        combine_results(str(tmp_path))


def test_output_dir_uses_env(monkeypatch, tmp_path):
    monkeypatch.setenv('JITDIST_PATH', str(tmp_path))
    assert get_output_dir('20240101_000000') == os.path.join(str(tmp_path), 'benchmark_results', '20240101_000000')
    monkeypatch.setenv('JITDIST_PATH', str(tmp_path / 'missing'))
    with pytest.raises(ValueError):
        get_output_dir('x')


def test_configure_threads(monkeypatch):
    monkeypatch.delenv('JITDIST_NUM_THREADS', raising=False)
    current = configure_threads()
    assert current >= 1
    assert configure_threads(1) == 1
    with pytest.raises(ValueError):
        configure_threads(0)
    configure_threads(current)


def test_cli_writes_results_and_plot(tmp_path, capsys):
    code = main(['--n-samples', '15', '--n-features', '3', '--runs', '1', '--seed', '0',
                 '--impl', 'numpy', '--impl', 'numba_parallel', '--output-dir', str(tmp_path), '--plot'])
    assert code == 0
    assert 'numba_parallel' in capsys.readouterr().out
    files = os.listdir(tmp_path)
    assert any(f.endswith('.parquet') for f in files)
    assert any(f.endswith('.png') for f in files)


def test_cli_rejects_bad_arguments():
    with pytest.raises(SystemExit) as exc:
        main(['--impl', 'fortran'])
    assert exc.value.code == 2
    with pytest.raises(SystemExit) as exc:
        main(['--runs', '0', '--no-save'])
    assert exc.value.code == 2


def test_run_benchmark_nan_input_still_matches():
    X = generate_data(10, 3, seed=0)
    X[4, 1] = np.nan
    results = run_benchmark(num_runs=1, implementations=['numpy', 'scipy', 'numba'], X=X)
    assert results['matches_reference'].all()


def test_combine_results_finds_cli_runs(monkeypatch, tmp_path):
    monkeypatch.setenv('JITDIST_PATH', str(tmp_path))
    for seed in ('0', '1'):
        assert main(['--n-samples', '8', '--n-features', '2', '--runs', '1', '--seed', seed, '--impl', 'numpy']) == 0
    combined = combine_results(str(tmp_path / 'benchmark_results'))
    assert len(combined) == 2
    assert combined['run_id'].nunique() == 2
    assert (combined['implementation'] == 'numpy').all()


def test_cli_checks_output_path_before_benchmark(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli, 'run_benchmark', lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv('JITDIST_PATH', str(tmp_path / 'missing'))
    with pytest.raises(SystemExit) as exc:
        main(['--n-samples', '8', '--impl', 'numpy'])
    assert exc.value.code == 2
    assert calls == []


def test_cli_implementation_errors_are_not_usage_errors(monkeypatch, tmp_path):
    def broken(X):
        raise ValueError("broken implementation")
    monkeypatch.setitem(benchmark.IMPLEMENTATIONS, 'scipy', broken)
    with pytest.raises(ValueError, match="broken implementation"):
        main(['--n-samples', '8', '--runs', '1', '--impl', 'scipy', '--no-save'])


def test_cli_rejects_plot_without_save():
    with pytest.raises(SystemExit) as exc:
        main(['--plot', '--no-save'])
    assert exc.value.code == 2
