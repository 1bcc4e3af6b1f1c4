# File: accelerate_vocab/modules/games/logics/onboarding.py
# Purpose: Intro slides shown before a game. A module's own slides are used
#          when it has exactly three; otherwise the defaults for its game type.

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import List, Optional, Sequence

from markupsafe import Markup, escape
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

SLIDE_COUNT = 3


class SlideIcon(str, Enum):
    """Closed set of icon identifiers a slide may use."""

    BOOK_OPEN = 'BookOpen'
    TARGET = 'Target'
    TROPHY = 'Trophy'
    LIGHTBULB = 'Lightbulb'
    GAMEPAD = 'Gamepad2'
    STAR = 'Star'
    ZAP = 'Zap'
    BRAIN = 'Brain'
    SPARKLES = 'Sparkles'
    # Used by the built-in defaults only
    MOUSE_POINTER_CLICK = 'MousePointerClick'
    CLIPBOARD_LIST = 'ClipboardList'
    CHECK_CIRCLE = 'CheckCircle2'
    CLOCK = 'Clock'
    ARROW_LEFT_RIGHT = 'ArrowLeftRight'
    ROTATE_CCW = 'RotateCcw'

    @classmethod
    def parse(cls, name: Optional[str]) -> 'SlideIcon':
        """Map a stored icon name to a member; unknown names become Sparkles."""
        try:
            return cls(name)
        except ValueError:
            return cls.SPARKLES


# Icons offered in the slide editor
EDITABLE_ICONS = (
    SlideIcon.BOOK_OPEN,
    SlideIcon.TARGET,
    SlideIcon.TROPHY,
    SlideIcon.LIGHTBULB,
    SlideIcon.GAMEPAD,
    SlideIcon.STAR,
    SlideIcon.ZAP,
    SlideIcon.BRAIN,
    SlideIcon.SPARKLES,
)


@dataclass(frozen=True)
class IconRenderer:
    glyph: str
    label: str

    def render(self, css_class: str = 'slide-icon') -> Markup:
        return Markup('<span class="{}" role="img" aria-label="{}">{}</span>').format(
            escape(css_class), escape(self.label), escape(self.glyph)
        )


ICON_RENDERERS = {
    SlideIcon.BOOK_OPEN: IconRenderer('\U0001F4D6', 'Book'),
    SlideIcon.TARGET: IconRenderer('\U0001F3AF', 'Target'),
    SlideIcon.TROPHY: IconRenderer('\U0001F3C6', 'Trophy'),
    SlideIcon.LIGHTBULB: IconRenderer('\U0001F4A1', 'Lightbulb'),
    SlideIcon.GAMEPAD: IconRenderer('\U0001F3AE', 'Gamepad'),
    SlideIcon.STAR: IconRenderer('⭐', 'Star'),
    SlideIcon.ZAP: IconRenderer('⚡', 'Lightning'),
    SlideIcon.BRAIN: IconRenderer('\U0001F9E0', 'Brain'),
    SlideIcon.SPARKLES: IconRenderer('✨', 'Sparkles'),
    SlideIcon.MOUSE_POINTER_CLICK: IconRenderer('\U0001F446', 'Click'),
    SlideIcon.CLIPBOARD_LIST: IconRenderer('\U0001F4CB', 'Clipboard'),
    SlideIcon.CHECK_CIRCLE: IconRenderer('✅', 'Check'),
    SlideIcon.CLOCK: IconRenderer('⏱', 'Clock'),
    SlideIcon.ARROW_LEFT_RIGHT: IconRenderer('↔', 'Left and right'),
    SlideIcon.ROTATE_CCW: IconRenderer('\U0001F504', 'Flip'),
}


def render_icon(name: Optional[str], css_class: str = 'slide-icon') -> Markup:
    return ICON_RENDERERS[SlideIcon.parse(name)].render(css_class)


@dataclass(frozen=True)
class Slide:
    slide_number: int
    icon: SlideIcon
    content: str
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data['icon'] = self.icon.value
        data['icon_html'] = str(render_icon(self.icon.value))
        return data


DEFAULT_SLIDES = {
    'matching': (
        Slide(1, SlideIcon.GAMEPAD,
              "Welcome to the Matching Game!\n\nYou'll see words and their definitions displayed on cards."),
        Slide(2, SlideIcon.MOUSE_POINTER_CLICK,
              "Click on a word card, then click on the matching definition card to make a pair."),
        Slide(3, SlideIcon.TROPHY,
              "Match all the pairs correctly to complete the game.\n\nGood luck!"),
    ),
    'multiple_choice': (
        Slide(1, SlideIcon.CLIPBOARD_LIST,
              "Welcome to the Multiple Choice Quiz!\n\n"
              "Test your vocabulary knowledge by selecting the correct answers."),
        Slide(2, SlideIcon.CHECK_CIRCLE,
              "For each question, you'll see a word and four possible definitions.\n\n"
              "Select the one that best matches the word."),
        Slide(3, SlideIcon.CLOCK,
              "You have 5 minutes to complete all questions.\n\nThe timer starts when you begin. Good luck!"),
    ),
    'synonym_match': (
        Slide(1, SlideIcon.BOOK_OPEN,
              "Welcome to Synonym Match!\n\nThis game has two parts to help you master vocabulary."),
        Slide(2, SlideIcon.ARROW_LEFT_RIGHT,
              "Part 1: Open Matching\nSelect a word on the left, then click its matching synonym on the right."),
        Slide(3, SlideIcon.ROTATE_CCW,
              "Part 2: Memory Match\nCards are face down. Flip them to find matching pairs.\n\nGood luck!"),
    ),
}

GENERIC_SLIDES = (
    Slide(1, SlideIcon.SPARKLES, "Welcome!\n\nGet ready to test and improve your vocabulary."),
    Slide(2, SlideIcon.TARGET, "Follow the on-screen instructions to complete each challenge."),
    Slide(3, SlideIcon.TROPHY, "Take your time and do your best.\n\nGood luck!"),
)


def default_slides(game_type: Optional[str]) -> List[Slide]:
    return list(DEFAULT_SLIDES.get(game_type or '', GENERIC_SLIDES))


def choose_slides(game_type: Optional[str], custom_rows: Optional[Sequence] = None) -> List[Slide]:
    """Custom slides when there are exactly three of them, else the defaults.

    ``custom_rows`` are ``OnboardingSlide`` rows (or anything with the same
    attributes).
    """
    rows = list(custom_rows or [])
    if len(rows) != SLIDE_COUNT:
        return default_slides(game_type)

    rows.sort(key=lambda row: row.slide_number)
    return [
        Slide(
            slide_number=row.slide_number,
            icon=SlideIcon.parse(row.icon_name),
            content=row.content or '',
            image_url=row.image_url or None,
        )
        for row in rows
    ]


def load_slides(module) -> List[Slide]:
    """Slides for a module row. Lookup errors fall back to the defaults."""

    game_type = getattr(module, 'game_type', None)
    try:
        return choose_slides(game_type, module.onboarding_slides)
    except SQLAlchemyError as exc:
        logger.error("Error loading onboarding slides for module %s: %s", getattr(module, 'id', None), exc)
        return default_slides(game_type)
