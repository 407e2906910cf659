"""
Lyric text normalization.

Two independent transforms:

- Display: what the player sees and types against. Controlled by the
  capitalization and punctuation toggles.
- Comparison: applied to both the display lyrics and the typed input
  before diffing, so curly quotes, dashes and accented letters can be
  typed on a plain keyboard.

The comparison transform maps every character to exactly one character,
so position ``i`` of the comparison form always lines up with position
``i`` of the text it came from.
"""

import unicodedata

# Substitutions applied before diacritic folding
COMPARISON_SUBSTITUTIONS = {
    '‘': "'",   # left single quotation mark
    '’': "'",   # right single quotation mark
    '“': '"',   # left double quotation mark
    '”': '"',   # right double quotation mark
    '—': '-',   # em dash
    'İ': 'I',   # capital I with dot above
    'ı': 'i',   # dotless i
    '¿': '?',   # inverted question mark
    '¡': '!',   # inverted exclamation mark
    '\n': ' ',
}

_SUBSTITUTION_TABLE = str.maketrans(COMPARISON_SUBSTITUTIONS)


def _keeps_without_punctuation(ch: str) -> bool:
    """Letters, numbers and whitespace survive punctuation stripping"""
    return ch.isspace() or unicodedata.category(ch)[0] in ('L', 'N')


def _fold_diacritics(ch: str) -> str:
    decomposed = unicodedata.normalize('NFD', ch)
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    # Characters that do not reduce to a single base letter are left alone
    return base if len(base) == 1 else ch


def normalize_for_display(text: str, capitalization: bool = True, punctuation: bool = True) -> str:
    """
    Apply the display toggles to lyric text

    Args:
        text: Raw lyric text
        capitalization: Keep original casing; lower-case everything when False
        punctuation: Keep punctuation; strip everything that is not a
                     letter, number or whitespace when False

    Returns:
        Display text
    """
    if not text:
        return ""

    if not capitalization:
        text = text.lower()

    if not punctuation:
        text = ''.join(ch for ch in text if _keeps_without_punctuation(ch))

    return text


def normalize_for_comparison(text: str) -> str:
    """
    Fold text into the form used for correctness comparison

    Args:
        text: Display lyrics or typed input

    Returns:
        Comparison text of the same length as ``text``
    """
    if not text:
        return ""

    substituted = text.translate(_SUBSTITUTION_TABLE)
    return ''.join(_fold_diacritics(ch) for ch in substituted)
