import lumiose_map.utils.i18n  # noqa:F401

from easydict import EasyDict as edict

from lumiose_map.utils.config import default_cfg
from lumiose_map.utils.env import load_cfg_from_env


def test_load_cfg_from_env():
    input_dict = {"LUMIOSE_a": 2, "LUMIOSE_eoq__trabson": 3}
    loaded = load_cfg_from_env(edict(), input_dict)
    assert loaded.a == 2
    assert loaded.eoq.trabson == 3


def test_load_cfg_from_env_coerces_to_default_type():
    env = {
        "LUMIOSE_editor__grid_size": "5",
        "LUMIOSE_editor__snap": "false",
        "LUMIOSE_storage__key": "other-key",
        "OTHER_editor__grid_size": "9",
    }
    cfg = load_cfg_from_env(default_cfg(), env)
    assert cfg.editor.grid_size == 5.0
    assert isinstance(cfg.editor.grid_size, float)
    assert cfg.editor.snap is False
    assert cfg.storage.key == "other-key"
