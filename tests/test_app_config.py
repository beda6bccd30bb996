import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from config.app_config import AppConfig
from core.exceptions import ConfigurationError

ENV_KEYS = [
    "DATABASE_PATH", "NODE_ID", "CHECK_RATE", "IGNORE_EMPTY_VMESS_ID",
    "XRAY_INBOUND_TAG", "XRAY_PROTOCOL", "XRAY_ALTER_ID", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for key in ENV_KEYS:
        os.environ.pop(key, None)


def test_loads_values_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        f"DATABASE_PATH={tmp_path / 'db' / 'panel.db'}\n"
        "NODE_ID=12\n"
        "CHECK_RATE=30\n"
        "IGNORE_EMPTY_VMESS_ID=true\n"
        "XRAY_INBOUND_TAG=vmess-in\n"
        "XRAY_ALTER_ID=2\n"
    )

    config = AppConfig.from_env(str(env_file))
    config.validate()

    assert config.node.node_id == 12
    assert config.node.check_rate == 30
    assert config.node.ignore_empty_vmess_id is True
    assert config.xray.inbound_tag == "vmess-in"
    assert config.xray.alter_id == 2
    assert (tmp_path / "db").is_dir()


def test_missing_node_id_is_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "panel.db"))
    config = AppConfig.from_env()

    with pytest.raises(ConfigurationError, match="NODE_ID"):
        config.validate()


def test_non_integer_is_rejected(monkeypatch):
    monkeypatch.setenv("CHECK_RATE", "soon")

    with pytest.raises(ConfigurationError, match="CHECK_RATE"):
        AppConfig.from_env()


def test_unknown_protocol_override_is_rejected(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "panel.db"))
    monkeypatch.setenv("NODE_ID", "1")
    monkeypatch.setenv("XRAY_PROTOCOL", "wireguard")

    with pytest.raises(ConfigurationError, match="XRAY_PROTOCOL"):
        AppConfig.from_env().validate()
