import pytest

from formula_transforms import config as config_mod
from formula_transforms.config import TransformsConfig, load_config
from formula_transforms.rules import REGISTRY, ConfigError, HoistMethods, ReorderMethods, build_transforms
from formula_transforms.types import TransformConfig


def test_default_config_runs_hoist_then_reorder():
    transforms = TransformsConfig().build()
    assert [type(t) for t in transforms] == [HoistMethods, ReorderMethods]
    assert all(t.member_names == ["install", "test", "caveats"] for t in transforms)


def test_registry_names():
    assert set(REGISTRY) == {"hoist_methods", "reorder_methods"}


def test_unknown_transform_is_a_config_error():
    with pytest.raises(ConfigError, match="Unknown transform: sort_everything"):
        build_transforms([{"name": "hoist_methods"}, {"name": "sort_everything"}])


def test_transform_config_defaults_and_legacy_key():
    assert TransformConfig.from_dict(None).member_names == ["install", "test", "caveats"]
    assert TransformConfig.from_dict({"methods": ["test", "install"]}).member_names == ["test", "install"]
    assert TransformConfig.from_dict({"member_names": ["caveats"]}).member_names == ["caveats"]


def test_unconfigured_names_sort_last():
    cfg = TransformConfig(member_names=["install", "test"])
    assert cfg.index_of("test") == 1
    assert cfg.index_of("caveats") == float("inf")


def test_load_config_from_yaml(tmp_path):
    p = tmp_path / "transforms.yml"
    p.write_text(
        "marker: '# generated'\n"
        "transforms:\n"
        "  - name: reorder_methods\n"
        "    config:\n"
        "      member_names: [caveats, install]\n",
        encoding="utf-8",
    )
    cfg = load_config(str(p))
    assert cfg.marker == "# generated"
    assert cfg.source == str(p)
    transforms = cfg.build()
    assert len(transforms) == 1
    assert isinstance(transforms[0], ReorderMethods)
    assert transforms[0].member_names == ["caveats", "install"]


def test_missing_default_file_uses_builtin_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_PATH", str(tmp_path / "nope.yml"))
    cfg = load_config()
    assert cfg.source is None
    assert [t["name"] for t in cfg.transforms] == ["hoist_methods", "reorder_methods"]


def test_missing_explicit_file_is_an_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(str(tmp_path / "nope.yml"))


@pytest.mark.parametrize("text, message", [
    ("transforms: hoist_methods\n", "must be a list"),
    ("transforms:\n  - config: {}\n", "needs a `name`"),
    ("transforms:\n  - name: hoist_methods\n    config: {member_names: install}\n", "list of names"),
    ("- just\n- a list\n", "mapping at the top level"),
    ("transforms: [\n", "invalid YAML"),
])
def test_bad_config_shapes(tmp_path, text, message):
    p = tmp_path / "transforms.yml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_config(str(p))


def test_empty_file_means_defaults(tmp_path):
    p = tmp_path / "transforms.yml"
    p.write_text("", encoding="utf-8")
    cfg = load_config(str(p))
    assert [type(t) for t in cfg.build()] == [HoistMethods, ReorderMethods]
