"""Assistant Replies — deterministic reply text for the music assistant.

Invariants:
    - Pure function: no IO, no async, no randomness
    - compose_reply() always returns a non-empty string
    - results=None means search was unavailable → non-search reply, never an error
    - Empty results on a music request → "couldn't find" fallback
    - Same text + same catalog results → same reply

Design Decisions:
    - Keyword rules over NLP: predictable, testable, zero dependencies
    - Rule order: music intent beats greeting/thanks so "hi, play X" searches
"""

import re
from enum import Enum

from tunechat.core.domain_types import CatalogItem, CatalogResults

_MAX_LISTED = 3

_WORD_RE = re.compile(r"[a-z0-9']+")

_GREETING_WORDS = frozenset({"hi", "hello", "hey", "hola", "yo", "greetings"})
_HELP_WORDS = frozenset({"help", "commands", "usage"})
_THANKS_WORDS = frozenset({"thanks", "thank", "thx", "ty", "cheers"})
_MUSIC_WORDS = frozenset({
    "song", "songs", "album", "albums", "play", "listen", "recommend",
    "find", "search", "track", "tracks", "music",
})
# Words dropped before querying the catalog
_FILLER_WORDS = _MUSIC_WORDS | _GREETING_WORDS | frozenset({
    "a", "an", "the", "me", "some", "any", "for", "by", "of", "to", "please",
    "can", "you", "i", "want", "would", "like", "is", "are", "there", "with",
    "called", "named", "about", "on", "in", "my", "show", "give", "get",
})

GREETING_REPLY = (
    "Hey there! I'm the music assistant. Ask me to find a song or an album."
)
HELP_REPLY = (
    "I can search the catalog for you. Try \"find songs by <name>\" or "
    "\"recommend an album\"."
)
THANKS_REPLY = "You're welcome! Enjoy the music."
NOT_FOUND_REPLY = (
    "I couldn't find anything in the catalog matching that. "
    "Try another song or album name."
)
GENERIC_REPLY = (
    "Thanks for your message! Ask me about songs or albums and I'll look "
    "them up."
)


class ReplyIntent(str, Enum):
    MUSIC = "music"
    GREETING = "greeting"
    HELP = "help"
    THANKS = "thanks"
    GENERIC = "generic"


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text.lower())


def classify_intent(text: str) -> ReplyIntent:
    words = set(_words(text))
    if words & _MUSIC_WORDS:
        return ReplyIntent.MUSIC
    if words & _GREETING_WORDS:
        return ReplyIntent.GREETING
    if words & _THANKS_WORDS:
        return ReplyIntent.THANKS
    if words & _HELP_WORDS:
        return ReplyIntent.HELP
    return ReplyIntent.GENERIC


def build_search_query(text: str) -> str:
    """Keywords left after removing filler; every word if none remain.

    Empty when the text has no word characters at all, meaning: do not search.
    """
    words = _words(text)
    keywords = [w for w in words if w not in _FILLER_WORDS]
    return " ".join(keywords or words)


def _format_items(label: str, items: tuple[CatalogItem, ...]) -> list[str]:
    if not items:
        return []
    lines = [f"{label}:"]
    for item in items[:_MAX_LISTED]:
        suffix = f" ({item.description})" if item.description else ""
        lines.append(f"- {item.name}{suffix}")
    return lines


def format_results(results: CatalogResults) -> str:
    lines = ["Here's what I found in the catalog:"]
    lines += _format_items("Songs", results.songs)
    lines += _format_items("Albums", results.albums)
    return "\n".join(lines)


def _keyword_reply(intent: ReplyIntent) -> str:
    return {
        ReplyIntent.GREETING: GREETING_REPLY,
        ReplyIntent.HELP: HELP_REPLY,
        ReplyIntent.THANKS: THANKS_REPLY,
    }.get(intent, GENERIC_REPLY)


def compose_reply(text: str, results: CatalogResults | None) -> str:
    """Combine keyword rules with catalog results into the final reply."""
    intent = classify_intent(text)
    if results is None:
        return _keyword_reply(intent)
    if intent is ReplyIntent.MUSIC:
        return NOT_FOUND_REPLY if results.is_empty else format_results(results)
    if intent is ReplyIntent.GENERIC and not results.is_empty:
        return format_results(results)
    return _keyword_reply(intent)
