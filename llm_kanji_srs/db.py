from __future__ import annotations
from sqlalchemy import Boolean, DateTime, Integer, String, Text, create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
import datetime
import os
from typing import Any, Dict, List, Optional

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"


class Base(DeclarativeBase):
    pass
DB_PATH: str = os.environ.get("LLM_KANJI_DB", "kanji_learning.db")
LEARN_BATCH_SIZE: int = int(os.environ.get("LLM_KANJI_BATCH", "5"))
engine = create_engine(f"sqlite:///{DB_PATH}")
# Prevent attribute expiration on commit so returned objects remain accessible
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


class StoreError(Exception):
    """Base class for kanji store failures."""


class NotFound(StoreError, LookupError):
    """No kanji with the requested id exists."""

    def __init__(self, kanji_id: Any) -> None:
        super().__init__(f"Kanji {kanji_id} not found")
        self.kanji_id = kanji_id


class PersistenceError(StoreError):
    """A write to the kanji store failed."""


class Kanji(Base):
    __tablename__ = "kanji"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kanji: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    meaning: Mapped[str] = mapped_column(Text, nullable=False)  # "/"-separated alternatives
    on_reading: Mapped[Optional[str]] = mapped_column(String, default="")  # in hiragana
    kun_reading: Mapped[Optional[str]] = mapped_column(String, default="")  # in hiragana
    example_word: Mapped[Optional[str]] = mapped_column(String)
    example_reading: Mapped[Optional[str]] = mapped_column(String)
    example_meaning: Mapped[Optional[str]] = mapped_column(String)
    difficulty_level: Mapped[int] = mapped_column(Integer, default=1)  # 1 (easiest) - 5
    # SRS fields
    is_learned: Mapped[bool] = mapped_column(Boolean, default=False)
    srs_level: Mapped[int] = mapped_column(Integer, default=0)  # 0 = never learned, 1-8
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    last_reviewed: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, nullable=True)
    next_review: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Kanji {self.id} {self.kanji} level={self.srs_level}>"


def is_db_initialized() -> bool:
    """Check if the database is already initialized by checking if tables exist."""
    from sqlalchemy import inspect
    inspector = inspect(engine)
    return "kanji" in inspector.get_table_names()


def init_db(seed: bool = False) -> None:
    """Initialize the database by creating all tables, optionally seeding the N5 deck."""
    Base.metadata.create_all(bind=engine)
    if seed:
        populate_n5_kanji()


def get_session() -> Session:
    return SessionLocal()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


__all__ = [
    "Kanji", "StoreError", "NotFound", "PersistenceError",
    "init_db", "get_session", "is_db_initialized",
    "load_item", "save_progress",
    "select_items_for_learning", "select_items_due_for_review",
    "get_all_kanji", "get_kanji_progress", "get_level_counts",
    "set_review_time", "reset_all_progress",
    "populate_n5_kanji", "import_kanji_csv",
]


# ----------------------------------------------------------------------
# Store operations used by the study session
# ----------------------------------------------------------------------
def load_item(kanji_id: int) -> Kanji:
    """Load one kanji, detached from the session. Raises NotFound."""
    session: Session = get_session()
    try:
        card: Optional[Kanji] = session.get(Kanji, kanji_id)
        if card is None:
            raise NotFound(kanji_id)
        session.expunge(card)
        return card
    finally:
        session.close()


def save_progress(
    kanji_id: int,
    new_level: int,
    new_is_learned: bool,
    next_review: datetime.datetime,
    last_reviewed: datetime.datetime,
) -> Kanji:
    """
    Store the outcome of one scheduled answer and bump the review counter.

    Raises NotFound if the kanji vanished, PersistenceError if the write fails.
    """
    session: Session = get_session()
    try:
        card: Optional[Kanji] = session.get(Kanji, kanji_id)
        if card is None:
            raise NotFound(kanji_id)
        card.srs_level = new_level
        card.is_learned = new_is_learned
        card.next_review = next_review
        card.last_reviewed = last_reviewed
        card.review_count = (card.review_count or 0) + 1
        session.commit()
        session.expunge(card)
        if DEBUG_MODE:
            print(f"💾 Kanji {card.kanji} → level {new_level}, learned={new_is_learned}, next review {next_review}")
        return card
    except SQLAlchemyError as e:
        session.rollback()
        if DEBUG_MODE:
            print(f"❌ Failed to save progress for kanji {kanji_id}: {e}")
        raise PersistenceError(f"Failed to update kanji progress: {e}") from e
    finally:
        session.close()


def select_items_for_learning(limit: Optional[int] = None) -> List[Kanji]:
    """Unlearned kanji in deck order."""
    if limit is None:
        limit = LEARN_BATCH_SIZE
    session: Session = get_session()
    cards = (
        session.query(Kanji)
        .filter(Kanji.is_learned == False)  # noqa: E712
        .order_by(Kanji.id.asc())
        .limit(limit)
        .all()
    )
    session.expunge_all()
    session.close()
    return cards


def select_items_due_for_review(now: Optional[datetime.datetime] = None) -> List[Kanji]:
    """Learned kanji whose next review time has passed, oldest first."""
    if now is None:
        now = _utcnow()
    session: Session = get_session()
    cards = (
        session.query(Kanji)
        .filter(Kanji.is_learned == True, Kanji.next_review <= now)  # noqa: E712
        .order_by(Kanji.next_review.asc())
        .all()
    )
    session.expunge_all()
    session.close()
    if DEBUG_MODE:
        print(f"🔎 {len(cards)} kanji due for review at {now}")
    return cards


def get_all_kanji() -> List[Kanji]:
    session: Session = get_session()
    cards = session.query(Kanji).order_by(Kanji.id.asc()).all()
    session.expunge_all()
    session.close()
    return cards


# ----------------------------------------------------------------------
# Statistics
# ----------------------------------------------------------------------
def get_kanji_progress(now: Optional[datetime.datetime] = None) -> Dict[str, int]:
    """Get kanji learning progress stats."""
    if now is None:
        now = _utcnow()
    session: Session = get_session()
    total = session.query(Kanji).count()
    learned = session.query(Kanji).filter(Kanji.is_learned == True).count()  # noqa: E712
    review_due = session.query(Kanji).filter(
        Kanji.is_learned == True, Kanji.next_review <= now  # noqa: E712
    ).count()
    session.close()
    return {
        "total": total,
        "learned": learned,
        "new": total - learned,
        "review_due": review_due,
    }


def get_level_counts() -> Dict[int, int]:
    """Count of kanji per SRS level; level 0 counts every unlearned kanji."""
    counts = {level: 0 for level in range(0, 9)}
    session: Session = get_session()
    rows = (
        session.query(Kanji.srs_level, func.count(Kanji.id))
        .filter(Kanji.is_learned == True)  # noqa: E712
        .group_by(Kanji.srs_level)
        .all()
    )
    for level, count in rows:
        counts[level] = count
    counts[0] = session.query(Kanji).filter(Kanji.is_learned == False).count()  # noqa: E712
    session.close()
    return counts


# ----------------------------------------------------------------------
# Testing utilities
# ----------------------------------------------------------------------
def set_review_time(kanji_id: int, seconds_from_now: int = 0) -> None:
    """Move a kanji's next review, e.g. to make it due immediately."""
    session: Session = get_session()
    try:
        card: Optional[Kanji] = session.get(Kanji, kanji_id)
        if card is None:
            raise NotFound(kanji_id)
        card.next_review = _utcnow() + datetime.timedelta(seconds=seconds_from_now)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Failed to set review time: {e}") from e
    finally:
        session.close()


def reset_all_progress() -> int:
    """Put every kanji back to the unlearned state. Returns rows touched."""
    session: Session = get_session()
    try:
        updated = session.query(Kanji).update(
            {
                Kanji.is_learned: False,
                Kanji.srs_level: 0,
                Kanji.review_count: 0,
                Kanji.last_reviewed: None,
                Kanji.next_review: None,
            },
            synchronize_session=False,
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Failed to reset kanji: {e}") from e
    finally:
        session.close()
    if DEBUG_MODE:
        print(f"🔄 Reset {updated} kanji to unlearned")
    return updated


# ----------------------------------------------------------------------
# Deck content
# ----------------------------------------------------------------------
# (kanji, meaning, on, kun, example word, example reading, example meaning, difficulty)
N5_KANJI = [
    # Numbers
    ("一", "one", "いち", "ひと", "一人", "ひとり", "one person", 1),
    ("二", "two", "に", "ふた", "二人", "ふたり", "two people", 1),
    ("三", "three", "さん", "みっ", "三時", "さんじ", "three o'clock", 1),
    ("四", "four", "し", "よん", "四月", "しがつ", "April", 1),
    ("五", "five", "ご", "いつ", "五時", "ごじ", "five o'clock", 1),
    ("六", "six", "ろく", "むっ", "六月", "ろくがつ", "June", 1),
    ("七", "seven", "しち", "なな", "七時", "しちじ", "seven o'clock", 1),
    ("八", "eight", "はち", "やっ", "八月", "はちがつ", "August", 1),
    ("九", "nine", "きゅう", "ここの", "九時", "くじ", "nine o'clock", 1),
    ("十", "ten", "じゅう", "とお", "十時", "じゅうじ", "ten o'clock", 1),
    # Days and time
    ("日", "day/sun", "にち", "ひ", "今日", "きょう", "today", 1),
    ("月", "month/moon", "げつ", "つき", "月曜日", "げつようび", "Monday", 1),
    ("火", "fire/Tuesday", "か", "ひ", "火曜日", "かようび", "Tuesday", 2),
    ("水", "water/Wednesday", "すい", "みず", "水曜日", "すいようび", "Wednesday", 1),
    ("木", "tree/Thursday", "もく", "き", "木曜日", "もくようび", "Thursday", 1),
    ("金", "gold/Friday/money", "きん", "かね", "金曜日", "きんようび", "Friday", 2),
    ("土", "earth/Saturday", "ど", "つち", "土曜日", "どようび", "Saturday", 1),
    ("年", "year", "ねん", "とし", "今年", "ことし", "this year", 1),
    ("時", "time/hour", "じ", "とき", "時間", "じかん", "time", 2),
    # People and family
    ("人", "person", "じん", "ひと", "日本人", "にほんじん", "Japanese person", 1),
    ("私", "I/me", "", "わたし", "私達", "わたしたち", "we", 1),
    ("父", "father", "ふ", "ちち", "お父さん", "おとうさん", "father", 2),
    ("母", "mother", "ぼ", "はは", "お母さん", "おかあさん", "mother", 2),
    ("子", "child", "し", "こ", "子供", "こども", "child", 2),
    ("男", "man/male", "だん", "おとこ", "男性", "だんせい", "male", 2),
    ("女", "woman/female", "じょ", "おんな", "女性", "じょせい", "female", 2),
    # Size and position
    ("大", "big", "だい", "おお", "大きい", "おおきい", "big", 1),
    ("小", "small", "しょう", "ちい", "小さい", "ちいさい", "small", 1),
    ("中", "middle/inside", "ちゅう", "なか", "中学校", "ちゅうがっこう", "middle school", 2),
    ("上", "up/above", "じょう", "うえ", "上手", "じょうず", "skillful", 2),
    ("下", "down/below", "か", "した", "下手", "へた", "unskillful", 2),
    ("前", "front/before", "ぜん", "まえ", "午前", "ごぜん", "morning", 2),
    ("後", "back/after", "ご", "うしろ", "午後", "ごご", "afternoon", 2),
    ("右", "right", "う", "みぎ", "右手", "みぎて", "right hand", 2),
    ("左", "left", "さ", "ひだり", "左手", "ひだりて", "left hand", 2),
    # Places and directions
    ("国", "country", "こく", "くに", "外国", "がいこく", "foreign country", 2),
    ("家", "house/home", "か", "いえ", "家族", "かぞく", "family", 1),
    ("学", "study/learn", "がく", "まな", "学校", "がっこう", "school", 1),
    ("校", "school", "こう", "", "学校", "がっこう", "school", 1),
    ("先", "previous/ahead", "せん", "さき", "先生", "せんせい", "teacher", 2),
    ("生", "life/birth", "せい", "い", "学生", "がくせい", "student", 1),
    ("東", "east", "とう", "ひがし", "東京", "とうきょう", "Tokyo", 3),
    ("西", "west", "せい", "にし", "関西", "かんさい", "Kansai region", 3),
    ("南", "south", "なん", "みなみ", "南口", "みなみぐち", "south exit", 3),
    ("北", "north", "ほく", "きた", "北海道", "ほっかいどう", "Hokkaido", 3),
    # Actions
    ("行", "go", "こう", "い", "行く", "いく", "to go", 2),
    ("来", "come", "らい", "く", "来る", "くる", "to come", 2),
    ("見", "see/look", "けん", "み", "見る", "みる", "to see", 1),
    ("聞", "hear/listen", "ぶん", "き", "聞く", "きく", "to hear", 2),
    ("話", "talk/story", "わ", "はなし", "話す", "はなす", "to speak", 2),
    ("読", "read", "どく", "よ", "読む", "よむ", "to read", 2),
    ("書", "write", "しょ", "か", "書く", "かく", "to write", 2),
    ("食", "eat/food", "しょく", "た", "食べる", "たべる", "to eat", 1),
    ("飲", "drink", "いん", "の", "飲む", "のむ", "to drink", 2),
    # Transportation
    ("車", "car", "しゃ", "くるま", "電車", "でんしゃ", "train", 1),
    ("電", "electricity", "でん", "", "電話", "でんわ", "telephone", 2),
    ("気", "spirit/feeling", "き", "", "元気", "げんき", "healthy", 2),
    ("元", "origin/source", "げん", "もと", "元気", "げんき", "healthy", 2),
    # Money
    ("円", "yen/circle", "えん", "", "百円", "ひゃくえん", "100 yen", 1),
    ("百", "hundred", "ひゃく", "", "百円", "ひゃくえん", "100 yen", 2),
    ("千", "thousand", "せん", "", "千円", "せんえん", "1000 yen", 2),
    ("万", "ten thousand", "まん", "", "一万円", "いちまんえん", "10,000 yen", 3),
    # Colors
    ("白", "white", "はく", "しろ", "白い", "しろい", "white", 2),
    ("黒", "black", "こく", "くろ", "黒い", "くろい", "black", 2),
    ("赤", "red", "せき", "あか", "赤い", "あかい", "red", 2),
    ("青", "blue", "せい", "あお", "青い", "あおい", "blue", 2),
    # Weather and nature
    ("天", "heaven/sky", "てん", "", "天気", "てんき", "weather", 3),
    ("雨", "rain", "う", "あめ", "雨天", "うてん", "rainy weather", 2),
    ("風", "wind", "ふう", "かぜ", "台風", "たいふう", "typhoon", 3),
    # Body
    ("手", "hand", "しゅ", "て", "手紙", "てがみ", "letter", 1),
    ("足", "foot/leg", "そく", "あし", "足音", "あしおと", "footstep", 2),
    ("目", "eye", "もく", "め", "目玉", "めだま", "eyeball", 2),
    ("口", "mouth", "こう", "くち", "入口", "いりぐち", "entrance", 1),
    ("耳", "ear", "じ", "みみ", "耳鼻科", "じびか", "ENT clinic", 3),
    # Misc
    ("出", "exit/come out", "しゅつ", "で", "出る", "でる", "to go out", 2),
    ("入", "enter", "にゅう", "はい", "入る", "はいる", "to enter", 1),
    ("立", "stand", "りつ", "た", "立つ", "たつ", "to stand", 2),
    ("休", "rest", "きゅう", "やす", "休む", "やすむ", "to rest", 2),
    ("何", "what", "なに", "なん", "何時", "なんじ", "what time", 1),
    ("名", "name", "めい", "な", "名前", "なまえ", "name", 1),
    ("今", "now", "こん", "いま", "今日", "きょう", "today", 1),
    ("新", "new", "しん", "あたら", "新しい", "あたらしい", "new", 2),
    ("古", "old", "こ", "ふる", "古い", "ふるい", "old", 2),
]


def populate_n5_kanji() -> int:
    """Insert the built-in N5 deck if the table is empty. Returns count inserted."""
    session: Session = get_session()
    try:
        if session.query(Kanji).count() > 0:
            return 0
        for kanji, meaning, on, kun, word, reading, word_meaning, difficulty in N5_KANJI:
            session.add(Kanji(
                kanji=kanji,
                meaning=meaning,
                on_reading=on,
                kun_reading=kun,
                example_word=word,
                example_reading=reading,
                example_meaning=word_meaning,
                difficulty_level=difficulty,
            ))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Failed to insert kanji: {e}") from e
    finally:
        session.close()
    print(f"✅ Seeded {len(N5_KANJI)} N5 kanji")
    return len(N5_KANJI)


def import_kanji_csv(csv_path: str) -> int:
    """
    Import extra kanji from a CSV file. Returns count of new rows.

    Expected header: kanji, meaning, on_reading, kun_reading and optionally
    example_word, example_reading, example_meaning, difficulty_level.
    Rows without a meaning or without any reading are skipped, as are kanji
    already in the deck.
    """
    import csv
    session: Session = get_session()
    imported = 0
    try:
        with open(csv_path, "r", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                character = (row.get("kanji") or "").strip()
                meaning = (row.get("meaning") or "").strip()
                on = (row.get("on_reading") or "").strip()
                kun = (row.get("kun_reading") or "").strip()
                if not character or not meaning or not (on or kun):
                    if DEBUG_MODE:
                        print(f"⚠️ Skipping incomplete row: {row}")
                    continue
                if session.query(Kanji).filter_by(kanji=character).first():
                    continue
                difficulty_raw = (row.get("difficulty_level") or "").strip()
                session.add(Kanji(
                    kanji=character,
                    meaning=meaning,
                    on_reading=on,
                    kun_reading=kun,
                    example_word=row.get("example_word") or None,
                    example_reading=row.get("example_reading") or None,
                    example_meaning=row.get("example_meaning") or None,
                    difficulty_level=int(difficulty_raw) if difficulty_raw else 1,
                ))
                # Flush so duplicates within the same file are caught by the query above
                session.flush()
                imported += 1
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Failed to import kanji: {e}") from e
    finally:
        session.close()
    print(f"✅ Imported {imported} kanji")
    return imported
