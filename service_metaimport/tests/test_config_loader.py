"""
Unit tests for the redirector configuration document.
"""

import json

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_metaimport.app.config import (
    MetaImportConfig, load_config, parse_config, parse_duration, split_host_port
)
from shared.errors import ConfigurationError


@pytest.fixture
def document():
    """Minimal valid configuration document."""
    return {
        "addr": ":8080",
        "paths": [
            {
                "prefix": "example.com/foo",
                "vcs": "git",
                "repo_template": "https://github.com/org/{{ components[2] }}"
            }
        ]
    }


def config_errors(document):
    """Parse a document expected to be invalid and return its error lines."""
    with pytest.raises(ConfigurationError) as exc_info:
        parse_config(json.dumps(document))
    return exc_info.value.details["errors"]


class TestParseConfig:
    """Test cases for parse_config."""

    def test_parse_valid(self, document):
        """Test a valid document."""
        config = parse_config(json.dumps(document))

        assert isinstance(config, MetaImportConfig)
        assert config.addr == ":8080"
        assert config.read_timeout is None
        assert config.tls is None
        assert len(config.paths) == 1
        assert config.paths[0].prefix == "example.com/foo"
        assert config.paths[0].min_components == 0

    def test_vcs_defaults_to_git(self, document):
        """Test vcs is optional."""
        del document["paths"][0]["vcs"]

        assert parse_config(json.dumps(document)).paths[0].vcs == "git"

    def test_listen_address(self, document):
        """Test host and port derived from addr."""
        config = parse_config(json.dumps(document))
        assert config.listen_host == "0.0.0.0"
        assert config.listen_port == 8080

        document["addr"] = "127.0.0.1:9000"
        config = parse_config(json.dumps(document))
        assert config.listen_host == "127.0.0.1"
        assert config.listen_port == 9000

    def test_syntax_error(self):
        """Test malformed JSON reports its position."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config('{"addr": ":8080",', source="conf.json")

        assert exc_info.value.message.startswith("syntax error at line 1")
        assert exc_info.value.details["source"] == "conf.json"
        assert exc_info.value.details["pos"] == 17

    def test_not_an_object(self):
        """Test a JSON document that is not an object."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config("[]")

        assert "expected a JSON object" in exc_info.value.message

    def test_unknown_top_level_field(self, document):
        """Test unknown fields are rejected."""
        document["listen"] = ":9090"

        errors = config_errors(document)

        assert any(line.startswith("listen:") for line in errors)

    def test_unknown_rule_field(self, document):
        """Test unknown rule fields are rejected."""
        document["paths"][0]["repo"] = "https://github.com/org/x"

        errors = config_errors(document)

        assert any(line.startswith("paths[0].repo:") for line in errors)

    def test_unknown_tls_field(self, document, tmp_path):
        """Test unknown tls fields are rejected."""
        cert = tmp_path / "cert.pem"
        cert.write_text("cert")
        document["tls"] = {"cert": str(cert), "priv_key": str(cert), "ca": str(cert)}

        errors = config_errors(document)

        assert any(line.startswith("tls.ca:") for line in errors)

    def test_empty_prefix(self, document):
        """Test an empty prefix is rejected."""
        document["paths"][0]["prefix"] = ""

        assert any(line.startswith("paths[0].prefix:") for line in config_errors(document))

    def test_missing_repo_template(self, document):
        """Test repo_template is required."""
        del document["paths"][0]["repo_template"]

        assert any(line.startswith("paths[0].repo_template:") for line in config_errors(document))

    def test_no_paths(self, document):
        """Test at least one rule is required."""
        document["paths"] = []

        assert any(line.startswith("paths:") for line in config_errors(document))

    @pytest.mark.parametrize("value", [-1, "3", 2.5, True])
    def test_invalid_min_components(self, document, value):
        """Test min_components must be a non-negative integer."""
        document["paths"][0]["min_components"] = value

        assert any(line.startswith("paths[0].min_components:") for line in config_errors(document))

    def test_all_errors_reported(self, document):
        """Test every problem is reported at once."""
        document["addr"] = "localhost"
        document["paths"].append({"prefix": "", "repo_template": ""})

        errors = config_errors(document)

        assert any(line.startswith("addr:") for line in errors)
        assert any(line.startswith("paths[1].prefix:") for line in errors)
        assert any(line.startswith("paths[1].repo_template:") for line in errors)

    @pytest.mark.parametrize("addr", ["localhost", "host:", "host:0", "host:99999", "bad_host!:80", "::1:80"])
    def test_invalid_addr(self, document, addr):
        """Test listen addresses without a valid host and port."""
        document["addr"] = addr

        assert any(line.startswith("addr:") for line in config_errors(document))

    def test_read_timeout_duration_string(self, document):
        """Test read_timeout accepts duration strings."""
        document["read_timeout"] = "1m30s"

        assert parse_config(json.dumps(document)).read_timeout == 90.0

    def test_read_timeout_nanoseconds(self, document):
        """Test numeric read_timeout values are nanoseconds."""
        document["read_timeout"] = 30000000000

        assert parse_config(json.dumps(document)).read_timeout == pytest.approx(30.0)

    @pytest.mark.parametrize("value", ["500ms", 5, 999999999, "soon", True])
    def test_read_timeout_invalid(self, document, value):
        """Test read_timeout must be a valid duration of at least one second."""
        document["read_timeout"] = value

        assert any(line.startswith("read_timeout:") for line in config_errors(document))

    def test_tls_files(self, document, tmp_path):
        """Test tls with existing files."""
        cert = tmp_path / "cert.pem"
        key = tmp_path / "key.pem"
        cert.write_text("cert")
        key.write_text("key")
        document["tls"] = {"cert": str(cert), "priv_key": str(key)}

        config = parse_config(json.dumps(document))

        assert config.tls.cert == cert
        assert config.tls.priv_key == key

    def test_tls_missing_files(self, document, tmp_path):
        """Test tls files must exist."""
        document["tls"] = {"cert": str(tmp_path / "nope.pem"), "priv_key": str(tmp_path / "nope.key")}

        errors = config_errors(document)

        assert any(line.startswith("tls.cert:") for line in errors)
        assert any(line.startswith("tls.priv_key:") for line in errors)

    def test_tls_requires_both_files(self, document, tmp_path):
        """Test tls needs a certificate and a key."""
        cert = tmp_path / "cert.pem"
        cert.write_text("cert")
        document["tls"] = {"cert": str(cert)}

        assert any(line.startswith("tls.priv_key:") for line in config_errors(document))


class TestLoadConfig:
    """Test cases for load_config."""

    def test_load_from_file(self, document, tmp_path):
        """Test loading a configuration file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps(document))

        config = load_config(path)

        assert config.paths[0].repo_template == "https://github.com/org/{{ components[2] }}"

    def test_load_missing_file(self, tmp_path):
        """Test an unreadable file is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path / "missing.json")

        assert "unable to read configuration file" in exc_info.value.message

    def test_load_reports_source(self, tmp_path):
        """Test validation errors name the file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"addr": ":80"}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert exc_info.value.details["source"] == str(path)


class TestHelpers:
    """Test cases for duration and address helpers."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0.0),
        ("1s", 1.0),
        ("1.5s", 1.5),
        ("1m30s", 90.0),
        ("2h", 7200.0),
        ("250ms", 0.25),
        ("-1s", -1.0),
        ("1h1m1s", 3661.0),
    ])
    def test_parse_duration(self, text, expected):
        """Test duration strings."""
        assert parse_duration(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "1", "s", "1x", "1s2", "1 s"])
    def test_parse_duration_invalid(self, text):
        """Test malformed durations."""
        with pytest.raises(ValueError):
            parse_duration(text)

    @pytest.mark.parametrize("addr,expected", [
        (":8080", ("", 8080)),
        ("localhost:80", ("localhost", 80)),
        ("10.0.0.1:443", ("10.0.0.1", 443)),
        ("[::1]:8443", ("::1", 8443)),
    ])
    def test_split_host_port(self, addr, expected):
        """Test valid listen addresses."""
        assert split_host_port(addr) == expected
