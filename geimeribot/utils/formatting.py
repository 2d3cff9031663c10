"""Small text formatting helpers shared by the commands"""


def format_duration(minutes: int) -> str:
    """Format minutes as '45 min', '2h' or '2h 5min'"""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}min" if mins > 0 else f"{hours}h"


def medal(position: int) -> str:
    """Medal emoji for the top three, otherwise the 1-based rank"""
    return {0: "🥇", 1: "🥈", 2: "🥉"}.get(position, f"{position + 1}.")
