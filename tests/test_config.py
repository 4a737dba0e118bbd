import json
import os
import sys

import pytest
from loguru import logger

from src.core.config import AppConfig, ConfigManager
from src.core.logging import setup_logging


def test_config_defaults():
    config = AppConfig()
    assert config.codegen.class_name == "GeneratedProgram"
    assert config.codegen.method_name == "execute"
    assert config.codegen.indent == 4
    assert config.build.target == "library"
    assert config.packaging.tool == "pyinstaller"


def test_config_created_with_defaults(tmp_path):
    path = tmp_path / "config.json"
    manager = ConfigManager(str(path))
    assert manager.data == AppConfig()
    assert json.loads(path.read_text(encoding="utf-8"))["codegen"]["indent"] == 4


def test_config_load_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"build": {"unit_name": "Demo", "target": "console"}}), encoding="utf-8")
    manager = ConfigManager(str(path))
    assert manager.get("build", "unit_name") == "Demo"
    assert manager.data.build.target == "console"
    assert manager.data.codegen.indent == 4


def test_config_load_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[codegen]\nindent = 2\nstrict_pins = true\n', encoding="utf-8")
    manager = ConfigManager(str(path))
    assert manager.data.codegen.indent == 2
    assert manager.data.codegen.strict_pins


def test_config_update_persists(tmp_path):
    path = str(tmp_path / "config.json")
    ConfigManager(path).update("packaging", "onefile", False)
    assert ConfigManager(path).data.packaging.onefile is False


def test_config_update_rejects_unknown_names(tmp_path):
    manager = ConfigManager(str(tmp_path / "config.json"))
    with pytest.raises(ValueError):
        manager.update("ai", "device", "cuda")
    with pytest.raises(ValueError):
        manager.update("codegen", "tabs", True)


def test_config_update_validates(tmp_path):
    manager = ConfigManager(str(tmp_path / "config.json"))
    with pytest.raises(ValueError):
        manager.update("codegen", "indent", 0)
    with pytest.raises(ValueError):
        manager.update("build", "target", "applet")
    assert manager.data.codegen.indent == 4


def test_config_malformed_file_falls_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    manager = ConfigManager(str(path))
    assert manager.data == AppConfig()
    assert json.loads(path.read_text(encoding="utf-8"))["build"]["unit_name"] == "GraphScriptGenerated"


def test_setup_logging_file_sink(tmp_path):
    log_dir = tmp_path / "logs"
    try:
        setup_logging(debug_mode=False, log_dir=str(log_dir))
        logger.info("file sink check")
        assert os.listdir(log_dir)
    finally:
        logger.remove()
        logger.add(sys.stderr)
