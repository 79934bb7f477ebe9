import ast
import operator as op
from decimal import Decimal, InvalidOperation

_ALLOWED_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
}

ZERO = Decimal("0")
CENT = Decimal("0.01")


def parse_amount_expr(expr) -> Decimal:
    """
    Parse a payment amount typed into the form.
    Allowed: numbers, + - * /, parentheses, unary +/-, thousands commas.
    Examples: "60", "1,200", "90/2", "(40+20)*1.5"
    Raises ValueError for anything else, including negative results.
    """
    if expr is None:
        raise ValueError("Amount is empty")

    s = str(expr).strip().replace(",", "").lstrip("$")
    if not s:
        raise ValueError("Amount is empty")

    try:
        node = ast.parse(s, mode="eval").body
    except (SyntaxError, RecursionError) as e:
        raise ValueError(f"Unsupported expression: {expr!r}") from e

    def _eval(n):
        if isinstance(n, ast.Constant) and isinstance(n.value, (int, float)) and not isinstance(n.value, bool):
            return Decimal(str(n.value))
        if isinstance(n, ast.UnaryOp) and type(n.op) in _ALLOWED_OPS:
            return _ALLOWED_OPS[type(n.op)](_eval(n.operand))
        if isinstance(n, ast.BinOp) and type(n.op) in _ALLOWED_OPS:
            return _ALLOWED_OPS[type(n.op)](_eval(n.left), _eval(n.right))
        raise ValueError(f"Unsupported expression: {expr!r}")

    try:
        val = _eval(node)
    except (ArithmeticError, RecursionError) as e:
        raise ValueError("Invalid numeric result") from e

    if not val.is_finite():
        raise ValueError("Invalid numeric result")
    if val < 0:
        raise ValueError("Amount cannot be negative")
    try:
        return val.quantize(CENT)
    except InvalidOperation as e:
        # more digits than the decimal context can hold at cent precision
        raise ValueError("Amount is too large") from e


def to_amount(x) -> Decimal:
    """Lenient conversion for stored rows: anything unparseable counts as zero."""
    if x is None:
        return ZERO
    if isinstance(x, Decimal):
        return x if x.is_finite() else ZERO
    try:
        return parse_amount_expr(x)
    except ValueError:
        return ZERO


def format_amount(x: Decimal) -> str:
    q = to_amount(x)
    if q == q.to_integral_value():
        return f"${int(q):,}"
    return f"${q:,.2f}"
