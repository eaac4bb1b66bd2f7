"""サーバー起動スクリプトのテスト"""

import run_server


def test_defaults(monkeypatch):
    monkeypatch.delenv("SGOV_HOST", raising=False)
    monkeypatch.delenv("SGOV_PORT", raising=False)

    args = run_server.parse_args([])

    assert args.host == "0.0.0.0"
    assert args.port == 8000
    assert args.reload is False
    assert args.log_level == "info"


def test_main_starts_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(run_server.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))

    run_server.main(["--port", "9000", "--reload", "--log-level", "debug"])

    app, options = calls[0]
    assert app == "backend.main:app"
    assert options["port"] == 9000
    assert options["reload"] is True
    assert options["log_level"] == "debug"
