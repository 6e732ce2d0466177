"""
Tests for the command line interface.
"""

import sys
from datetime import datetime, timezone

import pytest

from jobtracker import __version__, app
from jobtracker.config import Settings
from jobtracker.errors import AuthError
from jobtracker.storage import save_listings
from jobtracker.watermark import FirstRunPolicy


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["jobtracker", *argv])
    app.main()


class TestCli:
    def test_version(self, monkeypatch, capsys, tmp_path):
        monkeypatch.chdir(tmp_path)
        run_cli(monkeypatch, "--version")
        assert capsys.readouterr().out.strip() == __version__

    def test_runs_lists_saved_runs(self, monkeypatch, capsys, tmp_path, make_listing):
        monkeypatch.chdir(tmp_path)
        db_path = tmp_path / "jobs.db"
        started = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
        save_listings(db_path, started, [make_listing(title="Saved job")])

        run_cli(monkeypatch, "runs", "--db", str(db_path), "-v")

        out = capsys.readouterr().out
        assert "Found 1 runs" in out
        assert "2024-01-10T09:00:00+00:00" in out
        assert "Saved job" in out

    def test_runs_empty(self, monkeypatch, capsys, tmp_path):
        monkeypatch.chdir(tmp_path)
        run_cli(monkeypatch, "runs", "--db", str(tmp_path / "none.db"))
        assert "No saved runs" in capsys.readouterr().out

    def test_missing_token_exits(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("MASTER_ACCESS_TOKEN", raising=False)
        with pytest.raises(SystemExit, match="MASTER_ACCESS_TOKEN"):
            run_cli(monkeypatch, "once")


class TestBuildScheduler:
    def test_wires_settings(self, tmp_path):
        settings = Settings(
            access_token="tok",
            fetch_interval=2.0,
            blocked_keywords=frozenset({"php"}),
            enable_logging=True,
            first_run_policy=FirstRunPolicy.ALERT_ALL,
            retry_base_delay=5.0,
            db_path=tmp_path / "jobs.db",
        )

        scheduler = app.build_scheduler(settings)

        assert scheduler.interval == 2.0
        assert scheduler.blocklist == frozenset({"php"})
        assert scheduler.first_run_policy is FirstRunPolicy.ALERT_ALL
        # Retry base delay is clamped to the poll interval.
        assert scheduler.backoff.base_delay == 2.0
        assert scheduler.presenter.db_path == tmp_path / "jobs.db"

    def test_run_exits_nonzero_after_auth_failure(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MASTER_ACCESS_TOKEN", "tok")

        def fetch(self):
            raise AuthError("expired", status=401)

        monkeypatch.setattr(app.Fetcher, "fetch", fetch)
        monkeypatch.setattr(app.Presenter, "notify_stopped", lambda self: None)

        with pytest.raises(SystemExit) as exc:
            run_cli(monkeypatch, "run")
        assert exc.value.code == 1
