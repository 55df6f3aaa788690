from hostwatch.config import DEFAULT_CONFIG, clamp_interval, load_config


def test_defaults_without_path():
    cfg = load_config(None)
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG
    cfg["network"]["max_listeners"] = 1
    assert DEFAULT_CONFIG["network"]["max_listeners"] == 64

def test_yaml_merge(tmp_path, capsys):
    path = tmp_path / "hostwatch.yml"
    path.write_text(
        "interval: 300\n"
        "configs: [/etc/hosts]\n"
        "network:\n"
        "  max_listeners: 8\n"
        "  extra_common_ports: [9100]\n"
    )
    cfg = load_config(str(path))
    assert cfg["interval"] == 300
    assert cfg["configs"] == ["/etc/hosts"]
    assert cfg["network"]["max_listeners"] == 8
    assert cfg["network"]["max_connections"] == 128
    assert cfg["network"]["extra_common_ports"] == [9100]
    assert cfg["thresholds"] == DEFAULT_CONFIG["thresholds"]
    assert "Loaded config" in capsys.readouterr().err

def test_missing_file_warns_and_uses_defaults(tmp_path, capsys):
    cfg = load_config(str(tmp_path / "nope.yml"))
    assert cfg == DEFAULT_CONFIG
    assert "Warning: Could not load config" in capsys.readouterr().err

def test_invalid_yaml_warns(tmp_path, capsys):
    path = tmp_path / "bad.yml"
    path.write_text("network: [unclosed\n")
    assert load_config(str(path)) == DEFAULT_CONFIG
    assert "Warning" in capsys.readouterr().err

def test_non_mapping_yaml_warns(tmp_path, capsys):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n")
    assert load_config(str(path)) == DEFAULT_CONFIG
    assert "Warning" in capsys.readouterr().err

def test_clamp_interval():
    assert clamp_interval(0) == 1
    assert clamp_interval(-5) == 1
    assert clamp_interval(10**6) == 86400
    assert clamp_interval("30") == 30
    assert clamp_interval("soon") == 60

def test_empty_nested_sections_keep_defaults(tmp_path, capsys):
    path = tmp_path / "commented.yml"
    path.write_text(
        "thresholds:\n"
        "#  high_fd: 50\n"
        "network:\n"
        "#  max_listeners: 8\n"
        "report: 10\n"
    )
    cfg = load_config(str(path))
    assert cfg["thresholds"] == DEFAULT_CONFIG["thresholds"]
    assert cfg["network"] == DEFAULT_CONFIG["network"]
    assert cfg["report"] == DEFAULT_CONFIG["report"]
    err = capsys.readouterr().err
    assert "ignoring 'report'" in err
    assert "ignoring 'network'" not in err
