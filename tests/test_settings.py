import pytest

from prototool.settings import (
    Config,
    ConfigError,
    ExternalConfig,
    GenPluginType,
    parse_gen_plugin_type,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", GenPluginType.NONE),
        ("go", GenPluginType.GO),
        ("GO", GenPluginType.GO),
        ("gogo", GenPluginType.GOGO),
        ("GoGo", GenPluginType.GOGO),
    ],
)
def test_parse_gen_plugin_type(text, expected):
    assert parse_gen_plugin_type(text) is expected


def test_parse_gen_plugin_type_unknown():
    with pytest.raises(ConfigError):
        parse_gen_plugin_type("java")


@pytest.mark.parametrize(
    "text, is_go, is_gogo",
    [("", False, False), ("go", True, False), ("gogo", False, True)],
)
def test_gen_plugin_type_predicates(text, is_go, is_gogo):
    plugin_type = parse_gen_plugin_type(text)
    assert plugin_type.is_go() is is_go
    assert plugin_type.is_gogo() is is_gogo


@pytest.mark.parametrize("plugin_type", list(GenPluginType))
def test_gen_plugin_type_str_round_trip(plugin_type):
    assert parse_gen_plugin_type(str(plugin_type)) is plugin_type


@pytest.mark.parametrize(
    "text, expected",
    [("GO", "go"), ("GoGo", "gogo"), ("", "")],
)
def test_gen_plugin_type_str_values(text, expected):
    assert str(parse_gen_plugin_type(text)) == expected


def test_empty_config_defaults():
    config = Config()
    assert config.dir_path == ""
    assert config.compile.include_well_known_types is False
    assert config.gen.plugins == []


def test_external_config_from_none():
    assert ExternalConfig.from_dict(None) == ExternalConfig()


def test_external_config_from_dict_full():
    data = {
        "excludes": ["gen"],
        "protoc": {"allow_unused_imports": True, "version": "3.6.1", "includes": ["inc"]},
        "create": {"packages": [{"directory": "idl", "name": "foo"}]},
        "lint": {
            "ignores": [{"id": "enum_names", "files": ["a.proto"]}],
            "rules": {"no_default": True, "add": ["x"], "remove": ["y"]},
        },
        "generate": {
            "go_options": {"import_path": "example.com/idl", "extra_modifiers": {"a.proto": "pkg"}},
            "plugins": [{"name": "go", "type": "go", "flags": "plugins=grpc", "output": "gen"}],
        },
    }
    external = ExternalConfig.from_dict(data)
    assert external.excludes == ["gen"]
    assert external.protoc.allow_unused_imports is True
    assert external.protoc.version == "3.6.1"
    assert external.protoc.includes == ["inc"]
    assert external.create.packages[0].directory == "idl"
    assert external.create.packages[0].name == "foo"
    assert external.lint.ignores[0].id == "enum_names"
    assert external.lint.ignores[0].files == ["a.proto"]
    assert external.lint.rules.no_default is True
    assert external.lint.rules.add == ["x"]
    assert external.lint.rules.remove == ["y"]
    assert external.gen.go_options.import_path == "example.com/idl"
    assert external.gen.go_options.extra_modifiers == {"a.proto": "pkg"}
    plugin = external.gen.plugins[0]
    assert (plugin.name, plugin.type, plugin.flags, plugin.output, plugin.path) == (
        "go",
        "go",
        "plugins=grpc",
        "gen",
        "",
    )


@pytest.mark.parametrize(
    "data",
    [
        {"unknown": 1},
        {"protoc": {"versio": "3.6.1"}},
        {"lint": {"rules": {"added": ["x"]}}},
        {"generate": {"plugins": [{"name": "go", "bogus": "x"}]}},
    ],
)
def test_external_config_rejects_unknown_fields(data):
    with pytest.raises(ConfigError):
        ExternalConfig.from_dict(data)


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"excludes": "gen"},
        {"protoc": {"allow_unused_imports": "yes"}},
        {"generate": {"plugins": {"name": "go"}}},
    ],
)
def test_external_config_rejects_bad_types(data):
    with pytest.raises(ConfigError):
        ExternalConfig.from_dict(data)


def test_external_config_numeric_version_becomes_string():
    external = ExternalConfig.from_dict({"protoc": {"version": 3}})
    assert external.protoc.version == "3"