from flow_app.program.controllers import AppConfig, ConfigManager


def test_to_toml_roundtrip():
    cfg = AppConfig(export_path="progress.xlsx", database_path="", tick_seconds=0.5)
    toml_text = cfg.to_toml()
    assert 'export_path = "progress.xlsx"' in toml_text
    assert "tick_seconds = 0.5" in toml_text

    parsed = AppConfig.from_toml({
        "export_path": "progress.xlsx",
        "database_path": "",
        "test_notification_delay_seconds": 2,
        "tick_seconds": 0.5,
    })
    assert parsed.tick_seconds == 0.5
    assert parsed.test_notification_delay_seconds == 2.0


def test_from_toml_falls_back_on_garbage():
    parsed = AppConfig.from_toml({"tick_seconds": "fast", "test_notification_delay_seconds": -3})
    assert parsed.tick_seconds == 1.0
    assert parsed.test_notification_delay_seconds == 1.0
    assert parsed.export_path == "focus_flow_progress.xlsx"


def test_config_manager_seeds_from_defaults(tmp_path):
    manager = ConfigManager(tmp_path)
    assert (tmp_path / "config.toml").exists()
    assert manager.config.tick_seconds == 1.0
    assert manager.config.resolved_database_path(tmp_path) == tmp_path / "data.db"

    manager.config.export_path = "elsewhere.xlsx"
    manager.save()
    assert ConfigManager(tmp_path).config.export_path == "elsewhere.xlsx"


def test_config_manager_survives_broken_file(tmp_path):
    (tmp_path / "config.toml").write_text("this is = = not toml", encoding="utf-8")
    assert ConfigManager(tmp_path).config == AppConfig()
