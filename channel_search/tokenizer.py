from nltk.tokenize import RegexpTokenizer

MIN_TERM_LENGTH = 2

# Same separators for indexed fields and queries: whitespace, hyphen, underscore, dot.
_splitter = RegexpTokenizer(r"[\s\-_.]+", gaps=True)


def split_terms(text: str | None, min_length: int = MIN_TERM_LENGTH) -> list[str]:
    """Lowercase the text and return its words of at least `min_length` characters."""
    if not text:
        return []
    return [word for word in _splitter.tokenize(str(text).lower()) if len(word) >= min_length]


def split_query(text: str | None) -> list[str]:
    """Query words keep single characters; they still reach indexed terms through the fuzzy scan."""
    return split_terms(text, min_length=1)
