"""Keyword-driven smart replies used when the inference provider is unavailable."""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence, Tuple, TypeVar

from app.backend.schemas import ConversationMessage


T = TypeVar("T")


class RandomSource(Protocol):
	def choice(self, seq: Sequence[T]) -> T: ...


_GREETING_REPLIES = ("Hey there! 👋", "What's up?", "How's it going?")

# First matching category wins; order matters ("Nice game?" is a question).
_CATEGORY_REPLIES: Tuple[Tuple[Tuple[str, ...], Tuple[str, str, str]], ...] = (
	(("?",), ("Good question!", "Let me think...", "Not sure tbh")),
	(("!", "wow", "amazing"), ("That's awesome! 🔥", "So cool!", "Let's gooo!")),
	(("yes", "yeah", "agree", "right"), ("Totally agree!", "For sure!", "100%")),
	(("game", "play", "win", "gg"), ("GG! 🎮", "Nice play!", "W gaming")),
	(("lol", "haha", "funny", "😂"), ("Haha nice! 😂", "So funny!", "LMAO")),
	(("thank", "appreciate"), ("No problem!", "Anytime!", "Happy to help!")),
)

_DEFAULT_REPLY_SETS = (
	("Sounds good! 👍", "Let's do it!", "I'm down!"),
	("Nice one!", "That's cool!", "Love it!"),
	("Interesting!", "Tell me more", "Go on..."),
	("For real!", "No way!", "That's wild!"),
	("Facts!", "True that!", "Agreed!"),
	("Let's gooo!", "W chat", "Based"),
)


def match_category(text: str) -> Optional[Tuple[str, str, str]]:
	lowered = text.casefold()
	for markers, replies in _CATEGORY_REPLIES:
		if any(marker in lowered for marker in markers):
			return replies
	return None


def classify(
	messages: Sequence[ConversationMessage],
	rng: Optional[RandomSource] = None,
) -> List[str]:
	"""Suggest replies for the latest message without any I/O.

	Only the most recent message is inspected. When no category matches, one
	of the generic sets is drawn from ``rng`` (the module ``random`` state by
	default), so a seeded ``random.Random`` gives repeatable output.
	"""
	if not messages:
		return list(_GREETING_REPLIES)
	matched = match_category(messages[-1].text)
	if matched is not None:
		return list(matched)
	source = rng if rng is not None else random
	return list(source.choice(_DEFAULT_REPLY_SETS))
