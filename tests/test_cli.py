import json, pytest
from typer.testing import CliRunner

from cli.main import app
from conftest import DEFINE_CAT_REPLY, SHOW_DB_REPLY, SHOW_STRATEGIES_REPLY

runner = CliRunner()


@pytest.fixture()
def server(dict_server):
    return dict_server({
        "SHOW DB": SHOW_DB_REPLY,
        "SHOW STRATEGIES": SHOW_STRATEGIES_REPLY,
        'DEFINE * "cat"': DEFINE_CAT_REPLY,
        'DEFINE * "kat"': "552 No match",
        'DEFINE nope "cat"': "550 Invalid database, use SHOW DB for list",
        'MATCH * . "kat"': '152 2 matches\nwn "cat"\nwn "kit"\n.\n250 ok',
        'MATCH * prefix "ca"': '152 2 matches\nwn "cat"\nwn "catch"\n.\n250 ok',
    })


def _invoke(server, *args):
    return runner.invoke(app, ["--host", server.host, "--port", str(server.port), "--timeout", "5", *args])


def test_databases_table(server):
    result = _invoke(server, "databases")
    assert result.exit_code == 0, result.output
    assert "Foo Dictionary" in result.output
    assert "wn" in result.output


def test_databases_json(server):
    result = _invoke(server, "--json", "databases")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        {"name": "foo", "description": "Foo Dictionary"},
        {"name": "wn", "description": "WordNet (r) 3.0 (2006)"},
    ]


def test_strategies(server):
    result = _invoke(server, "strategies")
    assert result.exit_code == 0, result.output
    assert "prefix" in result.output


def test_define_prints_definitions(server):
    result = _invoke(server, "define", "cat")
    assert result.exit_code == 0, result.output
    assert "2 definition(s) found" in result.output
    assert "A small feline." in result.output


def test_define_suggests_on_miss(server):
    result = _invoke(server, "define", "kat", "--suggest")
    assert result.exit_code == 0, result.output
    assert "Perhaps you mean" in result.output
    assert "kit" in result.output


def test_define_without_suggestions(server):
    result = _invoke(server, "define", "kat", "--no-suggest")
    assert result.exit_code == 0, result.output
    assert "No definitions found" in result.output
    assert 'MATCH * . "kat"' not in server.received


def test_define_json_and_output_file(server, tmp_path):
    output = tmp_path / "cat.json"
    result = _invoke(server, "--json", "define", "cat", "--output", str(output))
    assert result.exit_code == 0, result.output
    saved = json.loads(output.read_text(encoding="utf-8"))
    assert [d["database"]["name"] for d in saved["definitions"]] == ["wn", "foo"]


def test_match(server):
    result = _invoke(server, "match", "ca", "--strategy", "prefix")
    assert result.exit_code == 0, result.output
    assert "catch" in result.output


def test_server_error_exits_1(server):
    result = _invoke(server, "define", "cat", "--database", "nope")
    assert result.exit_code == 1
    assert "Invalid database" in result.output


def test_unreachable_server_exits_1(dict_server):
    server = dict_server(banner="530 Access denied")
    result = _invoke(server, "databases")
    assert result.exit_code == 1
    assert "Error" in result.output


def test_invalid_port_is_usage_error():
    result = runner.invoke(app, ["--port", "0", "databases"])
    assert result.exit_code == 2


def test_doctor_run(server):
    result = _invoke(server, "doctor", "run")
    assert result.exit_code == 0, result.output
    assert "Handshake" in result.output
    assert "auth, mime" in result.output
    assert "2 available" in result.output


def test_doctor_set_server(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    result = runner.invoke(app, ["doctor", "set-server", "dict.example.org", "--port", "2629"])
    assert result.exit_code == 0, result.output
    env_files = list(tmp_path.rglob(".env"))
    assert len(env_files) == 1
    content = env_files[0].read_text(encoding="utf-8")
    assert "DICTCLIENT_HOST=dict.example.org" in content
    assert "DICTCLIENT_PORT=2629" in content
