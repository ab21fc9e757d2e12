"""
Tagged choice values for form fields that offer an "その他" (other) escape hatch.

A choice is either one of the offered options (`Selected`) or the user's own text
(`Custom`). Validation and shaping branch on the variant instead of comparing against
the "その他" label; the label only exists at the two boundaries:
- `from_form()` converts raw form input (the label plus its free-text companion),
- `label()` / `submitted_value()` collapse back to plain strings for the row.
"""

from __future__ import annotations

from typing import Annotated, Iterable, Literal, Union

from pydantic import BaseModel, Field

from jpycmap.domain.options import OTHER


class Selected(BaseModel):
    """One of the offered options."""

    kind: Literal["selected"] = "selected"
    value: str

    def is_blank(self) -> bool:
        return not self.value.strip()

    def label(self) -> str:
        return self.value

    def submitted_value(self) -> str | None:
        return self.value.strip() or None


class Custom(BaseModel):
    """The "その他" option together with the user's free text (possibly still blank)."""

    kind: Literal["custom"] = "custom"
    text: str = ""

    def is_blank(self) -> bool:
        return not self.text.strip()

    def label(self) -> str:
        return OTHER

    def submitted_value(self) -> str | None:
        return self.text.strip() or None


Choice = Annotated[Union[Selected, Custom], Field(discriminator="kind")]


def choice_from_form(value: str, other_text: str = "") -> Selected | Custom | None:
    """Convert a single-select form value; blank means "nothing selected"."""
    if not value:
        return None
    if value == OTHER:
        return Custom(text=other_text)
    return Selected(value=value)


def choices_from_form(values: list[str] | tuple[str, ...], other_text: str = "") -> list[Selected | Custom]:
    """Convert a multi-select form value, keeping the user's selection order.

    Raises:
        ValueError: If `values` is not a list of strings (e.g. a bare string).
    """
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"multi-select value must be a list, got {type(values).__name__}")
    out: list[Selected | Custom] = []
    for v in values:
        if not isinstance(v, str):
            raise ValueError(f"multi-select entries must be strings, got {type(v).__name__}")
        if not v:
            continue
        out.append(Custom(text=other_text) if v == OTHER else Selected(value=v))
    return out


def submitted_values(choices: Iterable[Selected | Custom]) -> list[str]:
    """Collapse a multi-select: offered options first, then non-blank custom text.

    The "その他" label itself is never part of the result.
    """
    choices = list(choices)
    selected = [c.value for c in choices if isinstance(c, Selected) and not c.is_blank()]
    custom = [c.text.strip() for c in choices if isinstance(c, Custom) and not c.is_blank()]
    return selected + custom
