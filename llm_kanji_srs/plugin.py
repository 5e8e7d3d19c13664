from . import db, kana
from .quiz import CORRECT, EMPTY, LEARNING, SessionSummary, StudySession
from typing import Any, Optional

import click
import llm  # type: ignore

QUIT_COMMAND = ":q"

QUESTIONS = {
    "meaning": "What is the meaning of this kanji?",
    "reading": "What is the reading of this kanji? (type UPPERCASE romaji, e.g. IICHI)",
}


def _reading_of(card: Any) -> str:
    return card.on_reading or card.kun_reading or "N/A"


def _show_batch(study: StudySession) -> None:
    for number, card in enumerate(study.items, 1):
        click.echo(f"\nKanji {number} of {len(study.items)}:  {card.kanji}")
        click.echo(f"  Meaning: {card.meaning}")
        click.echo(f"  Reading: {_reading_of(card)}")
        if card.example_word:
            click.echo(f"  Example: {card.example_word} ({card.example_reading}) - {card.example_meaning}")


def _run_pass(study: StudySession) -> Optional[SessionSummary]:
    """Ask every prompt until the pass completes. None if the learner quits."""
    total = len(study.session.prompts)
    while not study.is_complete:
        prompt = study.current_prompt
        card = study.current_item
        if prompt is None or card is None:
            break
        number = study.session.current_prompt_index + 1
        click.echo(f"\nQuestion {number} of {total}:  {card.kanji}")
        raw = click.prompt(QUESTIONS[prompt.kind], default="", show_default=False)
        if raw.strip() == QUIT_COMMAND:
            click.echo("Pass abandoned. Answers given so far have been saved.")
            return None

        answer = study.assist(raw)
        if answer != raw:
            click.echo(f"  → {answer}")

        outcome = study.submit(answer)
        if outcome.status == EMPTY:
            click.echo("Please enter an answer.")
            continue
        if outcome.status == CORRECT:
            click.echo("✅ Correct!")
        else:
            click.echo(f"❌ Incorrect. Correct answer: {outcome.expected}")
            study.retry()
        if outcome.missing_ids:
            click.echo(f"⚠️  Kanji {', '.join(map(str, outcome.missing_ids))} no longer exist; progress not saved.")
    return study.summary()


def _drive(study: StudySession) -> None:
    summary = _run_pass(study)
    if summary is None:
        return
    if study.mode == LEARNING:
        click.echo(f"\n🎉 Congratulations! You learned {len(summary.leveled_ids)} kanji!")
    else:
        click.echo(f"\n🎉 Review complete! You reviewed {len(study.items)} kanji!")
    if summary.missing_ids:
        click.echo(f"⚠️  {len(summary.missing_ids)} kanji were removed during the pass and were not updated.")


@llm.hookimpl  # type: ignore[misc]
def register_commands(cli: Any) -> None:

    @cli.command("kanji-init-db")  # type: ignore[misc]
    def init_db() -> None:
        """Initialize the kanji database and seed the N5 deck."""
        try:
            db.init_db(seed=True)
        except db.StoreError as e:
            click.echo(f"Database initialization failed: {e}")
            return
        click.echo("Database initialized.")

    @cli.command("kanji-learn")  # type: ignore[misc]
    @click.option("--limit", default=db.LEARN_BATCH_SIZE, show_default=True, help="Number of new kanji to study")
    def learn(limit: int) -> None:
        """Study a batch of new kanji, then quiz meaning and reading."""
        db.init_db()
        study = StudySession.for_learning(limit=limit)
        if not study.items:
            click.echo("No new kanji available for learning.")
            return
        _show_batch(study)
        click.echo("\nStarting quiz. Type :q to stop.")
        try:
            _drive(study)
        except db.StoreError as e:
            click.echo(f"\n⚠️  Could not save progress: {e}")

    @cli.command("kanji-review")  # type: ignore[misc]
    def review() -> None:
        """Review kanji that are due."""
        db.init_db()
        study = StudySession.for_review()
        if not study.items:
            click.echo("🎉 No kanji due for review! All caught up!")
            return
        click.echo(f"{len(study.items)} kanji due for review. Type :q to stop.")
        try:
            _drive(study)
        except db.StoreError as e:
            click.echo(f"\n⚠️  Could not save progress: {e}")

    @cli.command("kanji-stats")  # type: ignore[misc]
    def stats() -> None:
        """Show learning statistics."""
        db.init_db()
        progress = db.get_kanji_progress()
        total = progress["total"]
        percent = (progress["learned"] * 100) // total if total else 0
        click.echo(f"Total kanji:  {total}")
        click.echo(f"Learned:      {progress['learned']} ({percent}%)")
        click.echo(f"New:          {progress['new']}")
        click.echo(f"Due now:      {progress['review_due']}")
        click.echo("By SRS level:")
        for level, count in db.get_level_counts().items():
            label = "unlearned" if level == 0 else f"level {level}"
            click.echo(f"  {label:<10} {count}")

    @cli.command("kanji-romaji")  # type: ignore[misc]
    @click.argument("text")
    def romaji(text: str) -> None:
        """Convert UPPERCASE romaji to hiragana."""
        click.echo(kana.transliterate(text))

    @cli.command("kanji-reset")  # type: ignore[misc]
    @click.confirmation_option(prompt="Reset all kanji to unlearned?")
    def reset() -> None:
        """Reset every kanji to the unlearned state."""
        db.init_db()
        try:
            count = db.reset_all_progress()
        except db.StoreError as e:
            click.echo(f"Reset failed: {e}")
            return
        click.echo(f"Reset {count} kanji.")

    @cli.command("kanji-set-due")  # type: ignore[misc]
    @click.argument("kanji_id", type=int)
    @click.option("--seconds", default=0, show_default=True, help="Seconds from now until the review is due")
    def set_due(kanji_id: int, seconds: int) -> None:
        """Move a kanji's next review time (testing helper)."""
        try:
            db.set_review_time(kanji_id, seconds)
        except db.StoreError as e:
            click.echo(str(e))
            return
        click.echo(f"Kanji {kanji_id} due in {seconds} seconds.")
