from __future__ import annotations

import pytest

from mptrack import __main__ as cli
from mptrack.transport import Transport


@pytest.fixture(autouse=True)
def fake_network(monkeypatch, server):
    monkeypatch.setattr(cli, "setup_logging", lambda debug=False: None)
    monkeypatch.setattr("mptrack.client.Transport", lambda transport=None: Transport(server.transport))


def test_track_command(server):
    code = cli.main(["--token", "abc", "--test", "track", "signup", "-p", "plan=pro", "-p", "seats=3"])

    assert code == 0
    assert server.last.url.path == "/track"
    assert server.last.url.params["test"] == "1"
    props = server.payload()["properties"]
    assert props["plan"] == "pro"
    assert props["seats"] == 3


def test_token_from_environment(monkeypatch, server):
    monkeypatch.setenv("MPTRACK_TOKEN", "from-env")
    assert cli.main(["delete-user", "bob"]) == 0
    assert server.payload()["$token"] == "from-env"


def test_missing_token_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["track", "signup"])
    assert excinfo.value.code == 2


def test_import_command(monkeypatch, server):
    monkeypatch.setenv("MPTRACK_API_KEY", "secret")
    code = cli.main(["--token", "abc", "import", "signup", "2014-01-01T00:00:00+00:00"])

    assert code == 0
    assert server.last.url.path == "/import"
    assert server.last.url.params["api_key"] == "secret"
    assert server.payload()["properties"]["time"] == 1388534400


def test_import_without_key(server):
    assert cli.main(["--token", "abc", "import", "signup", "1400000000"]) == 2
    assert server.requests == []


def test_increment_command(server):
    assert cli.main(["--token", "abc", "increment", "bob", "logins=1", "name=x"]) == 0
    assert server.payload()["$add"] == {"logins": 1}


def test_rejected_request_exit_code(server):
    server.body = "0"
    assert cli.main(["--token", "abc", "set", "bob", "plan=pro"]) == 1


def test_invalid_charge_exit_code(server):
    assert cli.main(["--token", "abc", "charge", "bob", "lots"]) == 1
    assert server.requests == []
