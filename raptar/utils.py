from pathlib import Path


_SIZE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def format_size(size: int) -> str:
    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def is_under(path: Path, root: Path) -> bool:
    """Lexical ancestor-or-equal check; neither path is resolved."""
    return path == root or root in path.parents


def are_related(left: Path, right: Path) -> bool:
    return is_under(left, right) or is_under(right, left)


def compact_home_path(path: str | Path) -> str:
    text = str(path)
    home = str(Path.home())
    if text == home:
        return "~"
    home_prefix = f"{home}/"
    if text.startswith(home_prefix):
        return f"~/{text[len(home_prefix):]}"
    return text


def dotted_name(name: str) -> str:
    return name if name.startswith(".") else f".{name}"
