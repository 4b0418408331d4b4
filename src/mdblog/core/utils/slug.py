"""Slug generation for heading anchors and post identifiers"""

import re


# Base letter -> characters transliterated to it. The last group maps separators to a hyphen.
_TRANSLITERATIONS = {
    "a": "àáäâãåăæ",
    "c": "ç",
    "e": "èéëê",
    "g": "ǵ",
    "h": "ḧ",
    "i": "ìíïî",
    "m": "ḿ",
    "n": "ńǹñ",
    "o": "òóöôœø",
    "p": "ṕ",
    "r": "ŕ",
    "s": "ßśș",
    "t": "ț",
    "u": "ùúüûǘ",
    "w": "ẃ",
    "x": "ẍ",
    "y": "ÿ",
    "z": "ź",
    "-": "·/_,:;",
}
_TRANSLATE = {ord(ch): base for base, chars in _TRANSLITERATIONS.items() for ch in chars}

_CODE_TAG = re.compile(r"</?code>")
_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)
_HYPHENS = re.compile(r"--+")


def slugify(text: str) -> str:
    """Convert heading or title text to a lowercase, hyphen-separated URL fragment.

    Inline code markup collapses to backticks (later stripped), ``&`` becomes
    ``-and-`` and accented letters are folded to ASCII. An empty result means
    the text has no usable anchor.
    """
    text = str(text).replace("&amp;", "&").replace("&lt;", "<").replace("&gt;", ">")
    text = _CODE_TAG.sub("`", text)
    text = text.lower()
    text = text.replace(",", "").replace(".", "")
    text = _WHITESPACE.sub("-", text)
    text = text.translate(_TRANSLATE)
    text = text.replace("&", "-and-")
    text = _NON_WORD.sub("", text)
    text = _HYPHENS.sub("-", text)
    return text.strip("-")

