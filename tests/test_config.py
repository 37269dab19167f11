import pytest
from pydantic import ValidationError

from flagrouter.config import RouterConfig, load_config
from flagrouter.separators import Separators


def test_defaults():
    config = RouterConfig()
    assert config.separators == Separators(item=",", key_value=":", outer=";")
    assert config.show_defaults is True
    assert config.program is None


@pytest.mark.parametrize("value", ["", "ab", " ", 1])
def test_invalid_separator(value):
    with pytest.raises(ValidationError):
        RouterConfig(list_separator=value)


def test_unknown_setting():
    with pytest.raises(ValidationError):
        RouterConfig(colour=True)


def test_load_toml_table(tmp_path):
    path = tmp_path / "tool.toml"
    path.write_text('[flagrouter]\nlist_separator = "|"\nshow_defaults = false\n')
    config = load_config(path)
    assert config.separators.item == "|"
    assert config.show_defaults is False


def test_load_toml_top_level(tmp_path):
    path = tmp_path / "tool.toml"
    path.write_text('program = "tool"\n')
    assert load_config(str(path)).program == "tool"


def test_load_yaml(tmp_path):
    path = tmp_path / "tool.yaml"
    path.write_text("flagrouter:\n  key_value_separator: '='\n  outer_separator: '#'\n")
    config = load_config(path)
    assert config.separators == Separators(item=",", key_value="=", outer="#")


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "tool.yml"
    path.write_text("")
    assert load_config(path) == RouterConfig()


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_load_unsupported_suffix(tmp_path):
    path = tmp_path / "tool.json"
    path.write_text("{}")
    with pytest.raises(ValueError, match="Unsupported config file type"):
        load_config(path)


def test_load_non_mapping(tmp_path):
    path = tmp_path / "tool.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_config(path)


def test_load_invalid_setting(tmp_path):
    path = tmp_path / "tool.toml"
    path.write_text('list_separator = "||"\n')
    with pytest.raises(ValidationError):
        load_config(path)
