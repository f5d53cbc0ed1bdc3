"""
Local Dictionary Source

Offline spelling suggestions from a fixed table of common misspellings.

Always available, so it doubles as the fallback when the remote grammar
checker cannot be reached.
"""

import logging
import re
from typing import List

from ..models.schemas import Suggestion


logger = logging.getLogger(__name__)


COMMON_MISSPELLINGS = {
    'teh': 'the',
    'adn': 'and',
    'recieve': 'receive',
    'seperate': 'separate',
    'occured': 'occurred',
    'definately': 'definitely',
    'neccessary': 'necessary',
    'begining': 'beginning',
    'accomodate': 'accommodate',
    'enviroment': 'environment',
    'tommorow': 'tomorrow',
    'wierd': 'weird',
    'freind': 'friend',
}

# Stripped from both ends of a token before lookup
TOKEN_PUNCTUATION = ".,!?;:\"'()[]{}“”‘’"

TOKEN = re.compile(r'\S+')


class LocalDictionarySource:
    """
    Emits a spelling Suggestion for each whitespace token whose
    punctuation-stripped, lowercased form is a known misspelling.

    The span covers the whole token; suggested_text replaces only the
    misspelled core so leading/trailing punctuation survives an accept.
    """

    def __init__(self, misspellings: dict = None):
        self.misspellings = misspellings if misspellings is not None else COMMON_MISSPELLINGS

    def check(self, text: str, document_id: str) -> List[Suggestion]:
        suggestions = []

        for index, match in enumerate(TOKEN.finditer(text)):
            token = match.group(0)
            core = token.strip(TOKEN_PUNCTUATION)
            if not core:
                continue

            correction = self.misspellings.get(core.lower())
            if correction is None:
                continue

            lead = len(token) - len(token.lstrip(TOKEN_PUNCTUATION))
            corrected = token[:lead] + correction + token[lead + len(core):]

            suggestions.append(Suggestion(
                id=f"spell-{index}-{match.start()}",
                document_id=document_id,
                start=match.start(),
                end=match.end(),
                issue_type="spelling",
                original_text=token,
                suggested_text=corrected,
                explanation=f'Spelling: "{core}" should be "{correction}"',
                source="local",
            ))

        logger.debug("Local dictionary found %d suggestions", len(suggestions))
        return suggestions
