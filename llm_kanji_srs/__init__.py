"""
LLM Kanji SRS Plugin

A plugin for learning kanji meanings and readings with level-based
spaced repetition and romaji input assistance.
"""

from . import kana
from . import answers
from . import scheduler
from . import db
from . import quiz
from . import plugin

__version__ = "0.1.0"
__all__ = ["kana", "answers", "scheduler", "db", "quiz", "plugin"]
