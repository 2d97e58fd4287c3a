import re

MARKDOWN_PATTERN = re.compile(r"[*#]+")

# Emoticons, pictographs, transport/map, regional indicators, misc symbols, dingbats.
EMOJI_PATTERN = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\U0001F1E0-\U0001F1FF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "]"
)


def strip_markdown(text: str) -> str:
    """Purpose: Remove markdown emphasis and heading markers from model output.
    Inputs/Outputs: Input is a raw string; output has every "*" and "#" removed.
    Side Effects / State: None; pure function.
    Dependencies: Uses MARKDOWN_PATTERN.
    Failure Modes: Returns an empty string when input is falsy; literal asterisks
        and hashes in product names are removed as well.
    If Removed: Bold and heading syntax leaks into the chat bubble.
    Testing Notes: "**Forsaken** ## Hoodie" becomes "Forsaken  Hoodie".
    """
    if not text:
        return ""
    return MARKDOWN_PATTERN.sub("", text)


def strip_emoji(text: str) -> str:
    """Purpose: Remove emoji-range code points from model output.
    Inputs/Outputs: Input is a raw string; output without emoji code points.
    Side Effects / State: None; pure function.
    Dependencies: Uses EMOJI_PATTERN.
    Failure Modes: Code points outside the listed ranges pass through.
    If Removed: Emoji show up in the brand voice, which forbids them.
    Testing Notes: Check one code point from each range is removed.
    """
    if not text:
        return ""
    return EMOJI_PATTERN.sub("", text)


def sanitize_reply(text: str) -> str:
    # Markdown first, then emoji, then trim.
    return strip_emoji(strip_markdown(text)).strip()
