# textnorm.py
# Comparison keys and string similarity shared by extraction, matching and suggestions.

import re
import unicodedata
from typing import List

from rapidfuzz.distance import Levenshtein

# ----------------------------
# Whitespace / unicode
# ----------------------------
def norm_space(s: str) -> str:
    s = s.replace("\u00a0", " ")
    s = re.sub(r"\s+", " ", s).strip()
    return s


def norm_unicode(s: str) -> str:
    s = unicodedata.normalize("NFKC", s)
    return s


# ----------------------------
# Comparison keys
# ----------------------------
_STRIP_CHARS_RE = re.compile(r"[.,&()]")
_HYPHEN_SPACE_RE = re.compile(r"[-\s]+")
_ET_AL_RE = re.compile(r"\bet\s+al\b")
# "e.g." has already lost its dots by the time this runs
_SIGNAL_WORD_RE = re.compile(r"\b(?:eg|see|cf)\b")
_SPACES_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Canonical comparison key for author/year fragments.

    >>> normalize("Smith & Jones (2020)")
    'smith jones 2020'
    >>> normalize("(see Kofi et al., 2020a)")
    'kofi 2020a'
    """
    s = (text or "").lower()
    s = _STRIP_CHARS_RE.sub("", s)
    s = _HYPHEN_SPACE_RE.sub(" ", s)

    # Removing a token can bring two others together ("et et al al"), so run to a fixed point.
    prev = None
    while prev != s:
        prev = s
        s = _ET_AL_RE.sub(" ", s)
        s = _SIGNAL_WORD_RE.sub(" ", s)
        s = _SPACES_RE.sub(" ", s).strip()
    return s


def extract_first_author(author_string: str) -> str:
    cleaned = re.sub(r"\s*et\s+al\.?", "", author_string or "", flags=re.I).strip()
    parts = re.split(r"\s*[&,]\s*", cleaned)
    return parts[0].strip()


def strip_year_suffix(year: str) -> str:
    # "2020a" -> "2020"
    return re.sub(r"[a-z]$", "", year or "")


def extract_surname(name: str) -> str:
    """Last real word of a name: longer than one character and not a bare initial."""
    s = re.sub(r"\s*et\s+al\.?", "", name or "", flags=re.I)
    s = re.sub(r"[,.]", "", s)
    words = [w for w in s.split() if len(w) > 1 and not re.fullmatch(r"[A-Z]\.?", w)]
    return words[-1] if words else name


def split_author_list(auth_str: str) -> List[str]:
    # "Smith, J., Jones, K. and Lee, M." -> ["Smith", " J.", " Jones", ...]
    return re.split(r"[,&]|\sand\s", auth_str or "")


# ----------------------------
# Edit distance
# ----------------------------
def edit_distance(a: str, b: str) -> int:
    # unit cost insert / delete / substitute
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - edit_distance(a, b)) / longest
