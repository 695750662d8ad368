from onec_mcp.config import Config, load


def test_load_defaults(monkeypatch):
    monkeypatch.setenv("MCP_1C_BASE_URL", "")
    monkeypatch.setenv("MCP_1C_USER", "")
    monkeypatch.setenv("MCP_1C_PASSWORD", "")

    cfg = load()

    assert cfg.base_url == "http://localhost:8080/hs/mcp-1c"
    assert cfg.user == ""
    assert cfg.password == ""


def test_load_env_overrides(monkeypatch):
    monkeypatch.setenv("MCP_1C_BASE_URL", "http://custom:9090/api")
    monkeypatch.setenv("MCP_1C_USER", "admin")
    monkeypatch.setenv("MCP_1C_PASSWORD", "secret")

    cfg = load()

    assert cfg.base_url == "http://custom:9090/api"
    assert cfg.user == "admin"
    assert cfg.password == "secret"


def test_load_partial_override(monkeypatch):
    monkeypatch.setenv("MCP_1C_BASE_URL", "")
    monkeypatch.setenv("MCP_1C_USER", "operator")
    monkeypatch.setenv("MCP_1C_PASSWORD", "")

    cfg = load()

    assert cfg.base_url == "http://localhost:8080/hs/mcp-1c"
    assert cfg.user == "operator"
    assert cfg.password == ""


def test_load_unset_variables(monkeypatch):
    for name in ("MCP_1C_BASE_URL", "MCP_1C_USER", "MCP_1C_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    assert load() == Config()


def test_repr_hides_password(monkeypatch):
    monkeypatch.setenv("MCP_1C_PASSWORD", "secret")
    assert "secret" not in repr(load())