"""
Tests for process configuration.
"""

import pytest

from vanitypkg.config import DEFAULT_PROJECT_GLOB, DEFAULT_TEMPLATE_GLOB, GODOC, Config
from vanitypkg.errors import ConfigError


class TestDefaults:
    def test_defaults(self):
        config = Config()
        assert config.template_glob == DEFAULT_TEMPLATE_GLOB
        assert config.project_glob == DEFAULT_PROJECT_GLOB
        assert config.http_addr == ":8002"
        assert config.reload is True
        assert config.doc_host == GODOC == "http://godoc.org/"
        assert config.root_template == "main"
        assert config.refresh_delay == 3
        assert dict(config.extra) == {}

    def test_frozen(self):
        config = Config()
        with pytest.raises(AttributeError):
            config.reload = False

    def test_extra_is_read_only_copy(self):
        extra = {"site": "a"}
        config = Config(extra=extra)
        extra["site"] = "b"
        assert config.extra["site"] == "a"
        with pytest.raises(TypeError):
            config.extra["site"] = "c"

    @pytest.mark.parametrize("kwargs", [{"mount_path": "go"}, {"refresh_delay": -1}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            Config(**kwargs)


class TestHostPort:
    @pytest.mark.parametrize(
        "addr,expected",
        [
            (":8002", ("0.0.0.0", 8002)),
            ("127.0.0.1:80", ("127.0.0.1", 80)),
            ("localhost:8000", ("localhost", 8000)),
        ],
    )
    def test_valid(self, addr, expected):
        assert Config(http_addr=addr).host_port() == expected

    @pytest.mark.parametrize("addr", ["8002", "host:", "host:http"])
    def test_invalid(self, addr):
        with pytest.raises(ConfigError):
            Config(http_addr=addr).host_port()


class TestFromEnv:
    """Tests for VANITY_* environment variables."""

    def test_empty_environment_gives_defaults(self):
        assert Config.from_env({}) == Config()

    def test_all_variables(self):
        config = Config.from_env(
            {
                "VANITY_LOG": "/var/log/vanity.log",
                "VANITY_VERBOSE": "yes",
                "VANITY_TEMPLATES": "/srv/templates/*.tpl.*",
                "VANITY_PROJECTS": "/srv/projects/*.json",
                "VANITY_RELOAD": "false",
                "VANITY_HTTP": "127.0.0.1:9000",
                "VANITY_MOUNT": "/go/",
                "VANITY_ANALYTICS": "UA-1350650-1",
                "VANITY_DOC_HOST": "https://pkg.go.dev/",
                "VANITY_ROOT_TEMPLATE": "page",
                "VANITY_REFRESH_DELAY": "0",
                "VANITY_EXTRA": '{"site": "kylelemons.net"}',
            }
        )
        assert config.log_file == "/var/log/vanity.log"
        assert config.verbose is True
        assert config.template_glob == "/srv/templates/*.tpl.*"
        assert config.project_glob == "/srv/projects/*.json"
        assert config.reload is False
        assert config.host_port() == ("127.0.0.1", 9000)
        assert config.mount_path == "/go/"
        assert config.analytics == "UA-1350650-1"
        assert config.doc_host == "https://pkg.go.dev/"
        assert config.root_template == "page"
        assert config.refresh_delay == 0
        assert dict(config.extra) == {"site": "kylelemons.net"}

    def test_empty_log_disables_file(self):
        assert Config.from_env({"VANITY_LOG": ""}).log_file is None

    @pytest.mark.parametrize(
        "environ",
        [
            {"VANITY_RELOAD": "maybe"},
            {"VANITY_EXTRA": "{not json"},
            {"VANITY_EXTRA": "[1, 2]"},
            {"VANITY_REFRESH_DELAY": "soon"},
        ],
    )
    def test_bad_values(self, environ):
        with pytest.raises(ConfigError):
            Config.from_env(environ)


class TestWithOverrides:
    def test_none_is_ignored(self):
        config = Config().with_overrides(analytics=None, reload=False)
        assert config.analytics == ""
        assert config.reload is False
