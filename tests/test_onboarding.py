from types import SimpleNamespace

from accelerate_vocab.modules.games.logics.onboarding import (
    SlideIcon,
    choose_slides,
    default_slides,
    render_icon,
)


def _row(number, icon='Star', content='Hello', image_url=None):
    return SimpleNamespace(slide_number=number, icon_name=icon, content=content, image_url=image_url)


def test_three_custom_slides_are_used_in_order():
    rows = [_row(3, content='third'), _row(1, content='first'), _row(2, content='second', image_url='')]

    slides = choose_slides('matching', rows)

    assert [slide.content for slide in slides] == ['first', 'second', 'third']
    assert slides[1].image_url is None
    assert slides[0].icon is SlideIcon.STAR


def test_incomplete_custom_set_falls_back_to_defaults():
    slides = choose_slides('multiple_choice', [_row(1), _row(2)])

    assert slides == default_slides('multiple_choice')
    assert slides[0].content.startswith('Welcome to the Multiple Choice Quiz!')


def test_unknown_game_type_gets_generic_slides():
    slides = default_slides('crossword')

    assert len(slides) == 3
    assert slides[0].icon is SlideIcon.SPARKLES


def test_unknown_icon_renders_as_sparkles():
    assert SlideIcon.parse('Rocket') is SlideIcon.SPARKLES
    assert 'aria-label="Sparkles"' in str(render_icon('Rocket'))


def test_slide_dict_carries_rendered_icon():
    data = default_slides('synonym_match')[2].to_dict()

    assert data['icon'] == 'RotateCcw'
    assert data['slide_number'] == 3
    assert 'slide-icon' in data['icon_html']
