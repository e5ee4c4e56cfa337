"""Small helpers for composing human-readable event text."""


def natural_join(items: list[str], conjunction: str = "and", bold: bool = False) -> str:
    """Join items as prose: "a", "a and b", "a, b, and c"."""
    if bold:
        items = [f"**{item}**" for item in items]
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return f"{', '.join(items[:-1])}, {conjunction} {items[-1]}"


def rank_string(rank: int) -> str:
    """1 -> "1st", 2 -> "2nd", 11 -> "11th", 23 -> "23rd"."""
    if 10 <= rank % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
    return f"{rank}{suffix}"


def collapse_redundant_strings(lines: list[str]) -> list[str]:
    """Collapse runs of identical consecutive lines into "line _(xN)_"."""
    result: list[str] = []
    previous: str | None = None
    count = 0
    for line in lines:
        if line == previous:
            count += 1
            continue
        if previous is not None:
            result.append(previous if count == 1 else f"{previous} _(x{count})_")
        previous = line
        count = 1
    if previous is not None:
        result.append(previous if count == 1 else f"{previous} _(x{count})_")
    return result
