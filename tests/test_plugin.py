"""Tests for the llm plugin commands."""
import click
import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine

from llm_kanji_srs import db, plugin


@pytest.fixture(autouse=True)
def setup_db(tmp_path, monkeypatch):
    test_db = str(tmp_path / "test_plugin.db")
    monkeypatch.setenv("LLM_KANJI_DB", test_db)
    db.engine = create_engine(f"sqlite:///{test_db}")
    db.SessionLocal = db.sessionmaker(bind=db.engine, expire_on_commit=False)
    yield


@pytest.fixture
def cli() -> click.Group:
    group = click.Group()
    plugin.register_commands(group)
    return group


def add_kanji(kanji="一", meaning="one", on="いち", kun="ひと"):
    db.init_db()
    session = db.get_session()
    card = db.Kanji(kanji=kanji, meaning=meaning, on_reading=on, kun_reading=kun)
    session.add(card)
    session.commit()
    session.close()
    return card


def test_commands_registered(cli) -> None:
    assert {
        "kanji-init-db", "kanji-learn", "kanji-review", "kanji-stats",
        "kanji-romaji", "kanji-reset", "kanji-set-due",
    } <= set(cli.commands)


def test_romaji_command(cli) -> None:
    result = CliRunner().invoke(cli, ["kanji-romaji", "KANNJI"])
    assert result.exit_code == 0
    assert result.output.strip() == "かんじ"


def test_init_db_seeds_deck(cli) -> None:
    result = CliRunner().invoke(cli, ["kanji-init-db"])
    assert result.exit_code == 0
    assert "Database initialized." in result.output
    assert db.get_kanji_progress()["total"] == len(db.N5_KANJI)


def test_learn_with_no_new_kanji(cli) -> None:
    result = CliRunner().invoke(cli, ["kanji-learn"])
    assert result.exit_code == 0
    assert "No new kanji available for learning." in result.output


def test_learn_pass_marks_kanji_learned(cli) -> None:
    card = add_kanji()
    result = CliRunner().invoke(cli, ["kanji-learn", "--limit", "1"], input="one\nIICHI\n")
    assert result.exit_code == 0, result.output
    assert "いち" in result.output
    assert "You learned 1 kanji" in result.output

    stored = db.load_item(card.id)
    assert stored.is_learned is True
    assert stored.srs_level == 1


def test_learn_wrong_answer_shows_expected_and_retries(cli) -> None:
    card = add_kanji()
    result = CliRunner().invoke(cli, ["kanji-learn"], input="two\none\nIICHI\n")
    assert result.exit_code == 0, result.output
    assert "Correct answer: one" in result.output
    assert "Start the pass again" not in result.output
    assert db.load_item(card.id).is_learned is True


def test_quit_abandons_pass(cli) -> None:
    card = add_kanji()
    result = CliRunner().invoke(cli, ["kanji-learn"], input="one\n:q\n")
    assert result.exit_code == 0
    assert "Pass abandoned" in result.output
    assert db.load_item(card.id).is_learned is False


def test_review_with_nothing_due(cli) -> None:
    add_kanji()
    result = CliRunner().invoke(cli, ["kanji-review"])
    assert result.exit_code == 0
    assert "No kanji due for review" in result.output


def test_review_pass_levels_up(cli) -> None:
    card = add_kanji()
    now = db._utcnow()
    db.save_progress(card.id, 2, True, now, now)
    db.set_review_time(card.id, -5)

    result = CliRunner().invoke(cli, ["kanji-review"], input="one\nHITO\n")
    assert result.exit_code == 0, result.output
    assert "Review complete" in result.output
    assert db.load_item(card.id).srs_level == 3


def test_stats_command(cli) -> None:
    card = add_kanji()
    add_kanji("二", "two", "に", "ふた")
    now = db._utcnow()
    db.save_progress(card.id, 4, True, now, now)

    result = CliRunner().invoke(cli, ["kanji-stats"])
    assert result.exit_code == 0
    assert "Total kanji:  2" in result.output
    assert "Learned:      1 (50%)" in result.output
    assert "level 4" in result.output


def test_reset_command(cli) -> None:
    card = add_kanji()
    now = db._utcnow()
    db.save_progress(card.id, 4, True, now, now)
    result = CliRunner().invoke(cli, ["kanji-reset", "--yes"])
    assert result.exit_code == 0
    assert "Reset 1 kanji." in result.output
    assert db.load_item(card.id).srs_level == 0


def test_set_due_unknown_kanji(cli) -> None:
    db.init_db()
    result = CliRunner().invoke(cli, ["kanji-set-due", "999"])
    assert result.exit_code == 0
    assert "not found" in result.output


def test_learn_reports_failed_save_and_leaves_kanji_unlearned(cli, monkeypatch) -> None:
    card = add_kanji()

    def failing_save(*args, **kwargs):
        raise db.PersistenceError("disk full")

    monkeypatch.setattr(db, "save_progress", failing_save)
    result = CliRunner().invoke(cli, ["kanji-learn"], input="one\nIICHI\n")
    assert result.exit_code == 0, result.output
    assert "Could not save progress: disk full" in result.output
    assert "Congratulations" not in result.output
    assert db.load_item(card.id).is_learned is False
