import json

from config import CONFIG_FILE_NAME, FetchConfig, load_config


def write_config(directory, data):
    (directory / CONFIG_FILE_NAME).write_text(json.dumps(data), encoding="utf-8")


def test_defaults_without_file_or_env(tmp_path):
    config = load_config(str(tmp_path), environ={})
    assert config.base_url == ""
    assert config.default_headers is None


def test_reads_config_file(tmp_path):
    write_config(tmp_path, {"baseUrl": "https://api.example.com", "defaultHeaders": {"X-Key": "k"}})
    config = load_config(str(tmp_path), environ={})
    assert config.base_url == "https://api.example.com"
    assert config.default_headers == {"X-Key": "k"}


def test_environment_overrides_file(tmp_path):
    write_config(tmp_path, {"baseUrl": "https://file.example.com", "defaultHeaders": {"A": "1"}})
    environ = {
        "SHAR_BASE_URL": "https://env.example.com",
        "SHAR_DEFAULT_HEADERS": '{"B": "2"}',
    }
    config = load_config(str(tmp_path), environ=environ)
    assert config.base_url == "https://env.example.com"
    assert config.default_headers == {"B": "2"}


def test_malformed_header_env_is_ignored(tmp_path):
    config = load_config(str(tmp_path), environ={"SHAR_DEFAULT_HEADERS": "{not json"})
    assert config.default_headers is None


def test_headers_must_be_an_object(tmp_path):
    write_config(tmp_path, {"defaultHeaders": ["a", "b"]})
    assert load_config(str(tmp_path), environ={}).default_headers is None


def test_unreadable_config_file_falls_back(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text("{ broken", encoding="utf-8")
    config = load_config(str(tmp_path), environ={"SHAR_BASE_URL": "https://env.example.com"})
    assert config.base_url == "https://env.example.com"
    assert config.default_headers is None


def test_fetch_config_copies_headers():
    headers = {"A": "1"}
    config = FetchConfig("x", headers)
    headers["B"] = "2"
    assert config.default_headers == {"A": "1"}
