import logging
import operator
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Tuple

from .history import HistoryItem, HistoryStore

logger = logging.getLogger(__name__)

DIGITS = "0123456789"
OPERATORS = ("+", "−", "×", "÷")
CONTROLS = (".", "C", "±", "%", "=")

# Keyboard / ASCII spellings accepted by tap()
ALIASES = {
    "-": "−",
    "*": "×",
    "x": "×",
    "X": "×",
    "/": "÷",
    "c": "C",
    "Escape": "C",
    "Return": "=",
    "Enter": "=",
    "KP_Enter": "=",
    ",": ".",
}


def normalize_symbol(symbol: str) -> Optional[str]:
    """Map a tap or key name to a canonical keypad symbol, or None if unknown."""
    symbol = ALIASES.get(symbol, symbol)
    if len(symbol) == 1 and symbol in DIGITS:
        return symbol
    if symbol in OPERATORS or symbol in CONTROLS:
        return symbol
    return None


def _divide(a: float, b: float) -> float:
    # x / 0 leaves the dividend on screen
    if b == 0:
        logger.debug(f"Division by zero ignored, keeping {a!r}")
        return a
    return a / b


_OPERATIONS = {
    "+": operator.add,
    "−": operator.sub,
    "×": operator.mul,
    "÷": _divide,
}


def apply_operation(op: str, a: float, b: float) -> float:
    """Apply a binary keypad operator. Unknown operators yield ``b``."""
    fn = _OPERATIONS.get(op)
    if fn is None:
        return b
    return fn(a, b)


def format_number(value: float) -> str:
    """Shortest general representation, six significant digits (printf %g)."""
    return "%g" % value


def parse_display(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class CalculatorState:
    display: str = "0"
    stored_value: Optional[float] = None
    pending_op: Optional[str] = None
    typing: bool = False

    def __post_init__(self):
        if self.pending_op is not None:
            if self.pending_op not in OPERATORS:
                raise ValueError(f"Unknown operator: {self.pending_op!r}")
            if self.stored_value is None:
                raise ValueError("A pending operator needs a stored value")


class Calculation(NamedTuple):
    expression: str
    result: str


# -------------------------
# Reducer
# -------------------------
def _enter_digit(state: CalculatorState, digit: str) -> CalculatorState:
    if not state.typing:
        return replace(state, display=digit, typing=True)
    if state.display == "0":
        return replace(state, display=digit)
    if state.display == "-0":
        return replace(state, display="-" + digit)
    return replace(state, display=state.display + digit)


def _enter_decimal(state: CalculatorState) -> CalculatorState:
    if not state.typing:
        return replace(state, display="0.", typing=True)
    if "." in state.display:
        return state
    return replace(state, display=state.display + ".")


def _toggle_sign(state: CalculatorState) -> CalculatorState:
    value = parse_display(state.display)
    if value is None:
        return state
    return replace(state, display=format_number(-value))


def _percent(state: CalculatorState) -> CalculatorState:
    value = parse_display(state.display)
    if value is None:
        return state
    return replace(state, display=format_number(value / 100.0))


def _set_operation(state: CalculatorState, op: str) -> CalculatorState:
    current = parse_display(state.display)
    if current is None:
        if state.stored_value is None:
            return replace(state, typing=False)
        return replace(state, pending_op=op, typing=False)

    if state.pending_op is not None and state.typing:
        result = apply_operation(state.pending_op, state.stored_value, current)
        return CalculatorState(
            display=format_number(result), stored_value=result, pending_op=op, typing=False
        )
    return replace(state, stored_value=current, pending_op=op, typing=False)


def _equals(state: CalculatorState) -> Tuple[CalculatorState, Optional[Calculation]]:
    current = parse_display(state.display)
    if state.pending_op is None or current is None:
        return state, None

    a, op = state.stored_value, state.pending_op
    result = format_number(apply_operation(op, a, current))
    expression = f"{format_number(a)} {op} {format_number(current)}"
    return CalculatorState(display=result), Calculation(expression, result)


def reduce(state: CalculatorState, symbol: str) -> Tuple[CalculatorState, Optional[Calculation]]:
    """
    Apply one keypad symbol to ``state``.

    Returns the next state and, when ``=`` completes an operation, the
    calculation to record. Unknown symbols leave the state unchanged.
    """
    sym = normalize_symbol(symbol)
    if sym is None:
        return state, None
    if sym in DIGITS:
        return _enter_digit(state, sym), None
    if sym == ".":
        return _enter_decimal(state), None
    if sym == "C":
        return CalculatorState(), None
    if sym == "±":
        return _toggle_sign(state), None
    if sym == "%":
        return _percent(state), None
    if sym in OPERATORS:
        return _set_operation(state, sym), None
    return _equals(state)


# -------------------------
# Engine used by the GUI
# -------------------------
class CalculatorEngine:
    """Holds the current calculator state and records finished calculations."""

    def __init__(self, history: HistoryStore, state: Optional[CalculatorState] = None):
        self.history = history
        self._state = state or CalculatorState()

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def display(self) -> str:
        return self._state.display

    def tap(self, symbol: str) -> Optional[HistoryItem]:
        """Feed one symbol; returns the history item created by ``=``, if any."""
        self._state, calc = reduce(self._state, symbol)
        if calc is None:
            return None
        logger.debug(f"{calc.expression} = {calc.result}")
        return self.history.append(calc.expression, calc.result)

    def tap_all(self, symbols) -> str:
        for s in symbols:
            self.tap(s)
        return self.display

    def clear_history(self):
        self.history.clear()

    def delete_history(self, offsets):
        self.history.delete(offsets)


# Quick local demo (run with: python -m backend.engine)
if __name__ == "__main__":
    from .storage import MemoryStore

    c = CalculatorEngine(HistoryStore(MemoryStore()))
    print(c.tap_all(["1", "2", "+", "3", "="]))  # 15
    print(c.tap_all(["C", "1", "÷", "3", "="]))  # 0.333333
    print(c.tap_all(["C", "8", "÷", "0", "="]))  # 8
    for item in c.history:
        print(item.expression, "=", item.result)
