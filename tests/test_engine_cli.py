import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent


def _run(args, cwd):
    """Run `python -m trendlab.engine` in a child process with UTF-8 output."""
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT), env.get("PYTHONPATH", "")])
    env["PYTHONIOENCODING"] = "utf-8"
    env["MPLBACKEND"] = "Agg"
    return subprocess.run(
        [sys.executable, "-m", "trendlab.engine", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        env=env,
        encoding="utf-8",
        errors="replace",
    )


def test_engine_cli_with_simulated_history(tmp_path):
    res = _run(["--asset", "SOL", "--simulate", "--days", "60", "--seed", "1",
                "--data-dir", str(tmp_path / "data"), "--out", str(tmp_path / "logs")], cwd=tmp_path)
    assert res.returncode == 0, res.stderr

    for needle in ["SOL Technical Indicators", "RSI (latest)", "MACD / Signal", "Signals"]:
        assert needle in res.stdout

    (log_dir,) = list((tmp_path / "logs").iterdir())
    signals_log = (log_dir / "signals.log").read_text(encoding="utf-8")
    assert signals_log.startswith("========== Command Line ==========")
    assert (log_dir / "indicators.csv").exists()
    assert (log_dir / "indicators.png").exists()


def test_engine_cli_reports_not_enough_data(tmp_path, make_csv):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    make_csv(
        [{"date": f"2024-01-{d:02d}", "price": 10.0 + d} for d in range(1, 11)],
        filename="TEST.csv",
    ).rename(data_dir / "TEST.csv")

    res = _run(["--asset", "TEST", "--data-dir", str(data_dir), "--out", str(tmp_path / "logs")], cwd=tmp_path)
    assert res.returncode == 1
    assert "Not enough data for technical analysis" in res.stdout


def test_engine_cli_missing_file(tmp_path):
    res = _run(["--asset", "NOPE", "--data-dir", str(tmp_path)], cwd=tmp_path)
    assert res.returncode != 0
    assert "Data file not found" in res.stderr


def test_engine_cli_rejects_inverted_macd(tmp_path):
    res = _run(["--macd-fast", "30", "--data-dir", str(tmp_path)], cwd=tmp_path)
    assert res.returncode != 0
    assert "invalid indicator settings" in res.stderr
