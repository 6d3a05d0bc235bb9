from enum import Enum

from raptar.rules.models import Action


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


ACTION_STYLE = {
    Action.INCLUDE: UIStyle.GREEN.value,
    Action.EXCLUDE: UIStyle.RED.value,
}
