import json
import logging

from backend.tourbot.retrieval.loader import (
    DESTINATIONS_FILE,
    FOODS_FILE,
    TOURS_FILE,
    build_corpora,
    load_corpora,
)
from backend.tourbot.settings import PACKAGED_DATA_DIR, Settings


def test_packaged_data_loads():
    corpora = load_corpora(PACKAGED_DATA_DIR)
    sizes = corpora.sizes()
    assert sizes["destinations"] > 0
    assert sizes["foods"] > 0
    assert sizes["tours"] > 0
    assert sizes["policies"] > 0
    assert sizes["tips"] > 0
    assert sizes["flights"] > 0
    assert corpora.flights.find("DAD", "SGN") is not None


def test_missing_directory_gives_empty_corpora(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        corpora = load_corpora(tmp_path / "nope")
    assert set(corpora.sizes().values()) == {0}
    assert "not found" in caplog.text


def test_bad_files_degrade_to_empty(tmp_path):
    (tmp_path / DESTINATIONS_FILE).write_text("{not json", encoding="utf-8")
    (tmp_path / FOODS_FILE).write_text(json.dumps({"city": "Huế"}), encoding="utf-8")
    (tmp_path / TOURS_FILE).write_text(
        json.dumps([{"title": "Huế 2N1Đ"}, "junk", 3]), encoding="utf-8"
    )
    corpora = load_corpora(tmp_path)
    assert len(corpora.destinations) == 0
    assert len(corpora.foods) == 0
    assert [r["title"] for r in corpora.tours.records] == ["Huế 2N1Đ"]


def test_build_corpora_defaults_are_empty():
    corpora = build_corpora()
    assert set(corpora.sizes().values()) == {0}
    assert corpora.foods.top_matches("bun", limit=3) == []


def test_data_dir_defaults_to_packaged_data(monkeypatch):
    monkeypatch.delenv("DATA_DIR", raising=False)
    assert Settings(_env_file=None).data_dir == PACKAGED_DATA_DIR


def test_data_dir_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    assert Settings(_env_file=None).data_dir == tmp_path.resolve()


def test_result_limits_parsing():
    limits = Settings(_env_file=None, RESULT_LIMITS="foods=2, tours=x, bogus, tips=0").parsed_result_limits
    assert limits.foods == 2
    assert limits.tours == 4
    assert limits.tips == 0
    assert limits.destinations == 5
