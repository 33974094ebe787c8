import logging

from keydungeon import create_app
from keydungeon.server import _configure_logging


def test_configure_logging_writes_instance_log(tmp_path, monkeypatch):
    app = create_app({"TESTING": True})
    monkeypatch.setattr(app, "instance_path", str(tmp_path))
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        # Run twice to ensure handlers are replaced, not stacked
        _configure_logging(app)
        path = _configure_logging(app)
        assert len(root.handlers) == 2
        logging.getLogger("keydungeon.test").info("hello")
        for h in root.handlers:
            h.flush()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
    log_file = tmp_path / "app.log"
    assert path == str(log_file)
    assert "hello" in log_file.read_text()


def test_create_app_registers_dungeon_routes():
    app = create_app({"KEYDUNGEON_CACHE_MAX": 2})
    rules = {r.rule for r in app.url_map.iter_rules()}
    assert "/api/dungeon" in rules and "/api/dungeon/solution" in rules
    assert app.config["KEYDUNGEON_CACHE_MAX"] == 2
