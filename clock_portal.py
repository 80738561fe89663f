"""
Portal state model: what the dashboard says we are, what we are allowed to do next,
and what the portal claims it just did.
"""

import enum
import logging
from typing import Dict, Tuple

import clock_markup as markup
from clock_errors import ActionFailure, BadStatus, MarkupError, NoActionToTake, ResponseUnparsable

logger = logging.getLogger(__name__)

DISABLED_MARKER = "DISABLED"
ENABLED_MARKER = "enabled"
RESPONSE_MARKERS = ("caption", ENABLED_MARKER, "innerhtml")

CLOCK_OFF_CAPTION = "Clock Off"
END_BREAK_CAPTION = "End Break"


class Action(enum.Enum):
    """A portal button, valued by the control id the callback endpoint expects."""

    CLOCK_ON = "CLKONBTN"
    CLOCK_OFF = "CLKOFFBTN"
    BREAK_ON = "BRKSTABTN"
    BREAK_OFF = "BRKENDBTN"

    @property
    def wire_code(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class Status(enum.Enum):
    CLOCKED_ON = "Clocked On"
    CLOCKED_OFF = "Clocked Off"
    ON_BREAK = "Clocked On (On Break)"

    @property
    def label(self) -> str:
        return self.value

    def __str__(self) -> str:
        return f"Status: {self.value}"

    def to_action(self, want_active: bool) -> "Action":
        return plan_action(self, want_active)


# (status, want_active) -> action; missing keys have no enabled control to press.
TRANSITIONS: Dict[Tuple[Status, bool], Action] = {
    (Status.CLOCKED_ON, True): Action.BREAK_ON,
    (Status.CLOCKED_ON, False): Action.CLOCK_OFF,
    (Status.CLOCKED_OFF, True): Action.CLOCK_ON,
    (Status.ON_BREAK, False): Action.BREAK_OFF,
}


def resolve_status(html: str) -> Status:
    """Infer the current status from which dashboard buttons are rendered DISABLED.

    Three or more disabled buttons means clocked off. With exactly two, a disabled
    break-start button means we are on a break and a disabled break-end button means
    we are clocked on. Anything else is a layout we do not recognise.
    """
    lines = markup.tagged_lines(html, DISABLED_MARKER)

    ids = []
    for _ in range(2):
        line = next(lines, None)
        if line is None:
            raise BadStatus(f"Expected at least two disabled controls, found {len(ids)}")
        control_id = markup.attribute_value(line.text)
        if control_id is None:
            raise BadStatus(f"Disabled control without an ID attribute: {line.text.strip()!r}")
        ids.append(control_id)

    if next(lines, None) is not None:
        status = Status.CLOCKED_OFF
    elif Action.BREAK_ON.wire_code in ids:
        status = Status.ON_BREAK
    elif Action.BREAK_OFF.wire_code in ids:
        status = Status.CLOCKED_ON
    else:
        raise BadStatus(f"Unrecognised disabled controls: {ids}")

    logger.info(str(status))
    return status


def plan_action(status: Status, want_active: bool) -> Action:
    try:
        return TRANSITIONS[(status, want_active)]
    except KeyError:
        raise NoActionToTake(status, want_active) from None


def action_from_response(xml: str) -> Action:
    """Work out which action produced a callback response.

    The response describes the buttons' new state, so the inference runs backwards:
    an enabled "Clock Off" button means we just clocked on, a disabled one means we
    just clocked off. "End Break" follows the same rule for breaks.
    """
    lines = markup.tagged_lines(xml, *RESPONSE_MARKERS)
    try:
        pairs = markup.field_pairs(lines, ENABLED_MARKER)
    except MarkupError:
        logger.debug("Callback response lines do not pair up")
        raise

    # caption -> enabled, last occurrence wins
    seen: Dict[str, bool] = {}
    for caption_line, enabled_line in pairs:
        caption = markup.element_text(caption_line.text)
        if caption in (CLOCK_OFF_CAPTION, END_BREAK_CAPTION):
            seen[caption] = markup.element_text(enabled_line.text) == "true"

    if CLOCK_OFF_CAPTION in seen:
        return Action.CLOCK_ON if seen[CLOCK_OFF_CAPTION] else Action.CLOCK_OFF
    if END_BREAK_CAPTION in seen:
        return Action.BREAK_ON if seen[END_BREAK_CAPTION] else Action.BREAK_OFF
    raise ResponseUnparsable(
        f"Response mentions neither {CLOCK_OFF_CAPTION!r} nor {END_BREAK_CAPTION!r}"
    )


def confirm_action(submitted: Action, xml: str) -> Action:
    observed = action_from_response(xml)
    if observed is not submitted:
        logger.debug(f"Rejected callback response body: {xml[:400]}")
        raise ActionFailure(submitted, observed, xml)
    logger.info(f"Portal confirmed {submitted}")
    return observed
