import pytest

from event_store import SqlEventStore
from inspect_db import main

from conftest import TODAY, TOMORROW, local


def _seeded_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'events.db'}"
    store = SqlEventStore(url=url)
    store.add("Standup", local(TOMORROW, 9), local(TOMORROW, 9, 15))
    store.add("Retro", local(TODAY, 16), local(TODAY, 17))
    return url


def test_lists_every_event(tmp_path, capsys):
    url = _seeded_url(tmp_path)
    assert main(["--db", url]) == 0
    out = capsys.readouterr().out
    assert "Standup" in out
    assert "Retro" in out
    assert "2 row(s)." in out


def test_filters_by_local_date(tmp_path, capsys):
    url = _seeded_url(tmp_path)
    main(["--db", url, "--date", "2026-10-21"])
    out = capsys.readouterr().out
    assert "Standup" in out
    assert "09:00" in out
    assert "Retro" not in out
    assert "1 row(s)." in out


def test_empty_date(tmp_path, capsys):
    url = _seeded_url(tmp_path)
    main(["--db", url, "--date", "2026-10-25"])
    assert capsys.readouterr().out.strip() == "No events found on 2026-10-25."


def test_limit(tmp_path, capsys):
    url = _seeded_url(tmp_path)
    main(["--db", url, "--limit", "1"])
    assert "1 row(s)." in capsys.readouterr().out


def test_refuses_in_memory_default(capsys, monkeypatch):
    monkeypatch.delenv("SCHEDULER_DATABASE_URL", raising=False)
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2
    assert "SCHEDULER_DATABASE_URL" in capsys.readouterr().err


def test_reads_database_url_from_environment(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("SCHEDULER_DATABASE_URL", _seeded_url(tmp_path))
    assert main([]) == 0
    assert "2 row(s)." in capsys.readouterr().out
