"""Line-based text search over extracted document text."""

from typing import List

from pydantic import BaseModel, Field


class SearchMatch(BaseModel):
    line: int = Field(ge=1, description="1-based line number of the match")
    text: str = Field(description="Matched line with surrounding whitespace removed")
    context: str = Field(description="Previous, matching and next line")


def search_text(text: str, query: str, case_sensitive: bool = False) -> List[SearchMatch]:
    """Find every line containing ``query``.

    Matching lowercases both sides unless ``case_sensitive`` is set; the
    returned line and context always use the original text.
    """
    needle = query if case_sensitive else query.lower()
    lines = text.split("\n")
    matches = []

    for index, line in enumerate(lines):
        haystack = line if case_sensitive else line.lower()
        if needle not in haystack:
            continue

        context_start = max(0, index - 1)
        context_end = min(len(lines), index + 2)
        matches.append(
            SearchMatch(
                line=index + 1,
                text=line.strip(),
                context="\n".join(lines[context_start:context_end]),
            )
        )

    return matches
