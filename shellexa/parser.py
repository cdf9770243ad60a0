"""Extraction of a single shell command from model output.

Language models rarely answer with a bare command even when told to.
Responses are usually wrapped in a Markdown code fence, sometimes with a
language tag, or mention the command inline between single back-ticks
surrounded by prose.  This module pulls exactly one candidate command out
of such text:

* The first triple back-tick fence wins.  A language tag on the opening
  fence line (````` ```bash `````) is dropped.
* Only when the text has no fenced block at all is the first inline
  single back-tick span used.
* Whitespace and newlines around the match are trimmed.  A blank match
  means no command was found.

The parser never raises; callers receive ``None`` when nothing usable is
present and decide whether to ask the model again.
"""

from __future__ import annotations

import re
from typing import Optional

_FENCED_BLOCK = re.compile(r"```(?:[\w+#.-]+[ \t]*\r?\n)?(.*?)```", re.DOTALL)
_INLINE_SPAN = re.compile(r"`([^`]+)`")


def parse_command(response: Optional[str]) -> Optional[str]:
    """Return the command contained in ``response`` or ``None``.

    :param response: Raw text returned by the model provider.
    :returns: The trimmed command string, never empty, or ``None`` when the
      text contains no fenced block or inline span with content.
    """
    if not isinstance(response, str) or "`" not in response:
        return None

    fenced = _FENCED_BLOCK.search(response)
    if fenced is not None:
        return _non_empty(fenced.group(1))

    inline = _INLINE_SPAN.search(response)
    if inline is not None:
        return _non_empty(inline.group(1))
    return None


def _non_empty(text: str) -> Optional[str]:
    stripped = text.strip()
    return stripped or None
