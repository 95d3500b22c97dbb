"""Effect formula evaluation.

Skill and spell effects may carry a formula string parametrized by
``level``. Formulas are evaluated by the d20 expression engine, which
understands arithmetic and dice notation only, so definition data can
never execute code.

Example:
    >>> evaluate_formula("level * 3 + 2", level=4)
    14.0
"""

from __future__ import annotations

import re

from spellbinder.core.exceptions import FormulaError
from spellbinder.core.logging import get_logger


logger = get_logger(__name__)

_LEVEL_PATTERN = re.compile(r"\blevel\b")


def evaluate_formula(formula: str, level: int) -> float:
    """Evaluate a formula for a given level.

    Args:
        formula: Expression such as ``"level * 2 + 5"`` or ``"1d6 + level"``.
        level: Value substituted for ``level``.

    Returns:
        The total of the expression. Fractional parts are kept.

    Raises:
        FormulaError: If the formula is empty or not a valid expression.
    """
    if not formula or not formula.strip():
        raise FormulaError("Empty formula", expression=formula)

    expression = _LEVEL_PATTERN.sub(str(level), formula)

    try:
        import d20

        result = d20.roll(expression)
    except ImportError as exc:
        raise FormulaError(
            "d20 library not installed. Install with: pip install d20",
            expression=formula,
        ) from exc
    except Exception as exc:
        raise FormulaError(f"Invalid formula: {exc}", expression=formula) from exc

    logger.debug("Formula evaluated", formula=formula, level=level, total=result.total)
    return float(result.total)


def effect_value(value: float, level: int, formula: str | None = None) -> float:
    """Compute the contribution of an effect at a level.

    Without a formula the contribution is ``value * level``. A formula
    that fails to evaluate falls back to the same product.

    Args:
        value: Per-level scalar of the effect.
        level: Current level of the owning skill or spell.
        formula: Optional formula string.

    Returns:
        The effect contribution.
    """
    if formula:
        try:
            return evaluate_formula(formula, level)
        except FormulaError as exc:
            logger.warning(
                "Effect formula failed, using per-level value",
                formula=formula,
                error=exc.message,
            )
    return value * level


__all__ = [
    "evaluate_formula",
    "effect_value",
]
