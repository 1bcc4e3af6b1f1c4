# File: accelerate_vocab/modules/admin/content_management/forms.py
# Purpose: Forms for modules, vocabulary items, onboarding slides and spreadsheet imports.

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import (
    BooleanField,
    FieldList,
    Form,
    FormField,
    HiddenField,
    SelectField,
    StringField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import DataRequired, Length, Optional, URL

from ....models import Module, VocabItem
from ...games.logics.onboarding import EDITABLE_ICONS, SLIDE_COUNT


class ModuleForm(FlaskForm):
    """
    Create or edit a module.
    """
    title = StringField('Title', validators=[DataRequired(message="Please enter a title."), Length(max=255)])
    description = TextAreaField('Description', validators=[Optional()])
    subject = StringField('Subject', validators=[Optional(), Length(max=120)])
    level = SelectField('Level', choices=[(level, level) for level in Module.LEVELS], default=Module.LEVELS[0])
    game_type = SelectField(
        'Game type',
        choices=[(value, Module.GAME_TYPE_LABELS[value]) for value in Module.GAME_TYPES],
        default=Module.GAME_MATCHING,
    )
    is_active = BooleanField('Active (visible to assigned pupils)', default=True)
    submit = SubmitField('Save module')


class VocabItemForm(FlaskForm):
    """
    Create or edit a vocabulary item. Multiple-choice modules need every option.
    """
    word = StringField('Word', validators=[DataRequired(message="Please enter the word."), Length(max=255)])
    definition = TextAreaField('Definition', validators=[DataRequired(message="Please enter the definition.")])
    example = TextAreaField('Example sentence', validators=[Optional()])
    category = StringField('Category', validators=[Optional(), Length(max=120)])
    option_a = StringField('Option A', validators=[Optional()])
    option_b = StringField('Option B', validators=[Optional()])
    option_c = StringField('Option C', validators=[Optional()])
    option_d = StringField('Option D', validators=[Optional()])
    correct_option = SelectField(
        'Correct option',
        choices=[(letter, letter) for letter in VocabItem.OPTION_LETTERS],
        default='A',
    )
    submit = SubmitField('Save question')

    def __init__(self, *args, require_options=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.require_options = require_options

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        if not self.require_options:
            return True

        missing = [
            field for field in (self.option_a, self.option_b, self.option_c, self.option_d)
            if not (field.data or '').strip()
        ]
        for field in missing:
            field.errors.append('Multiple choice questions need all four options.')
        return not missing


class SlideEntryForm(Form):
    """One slide inside SlidesForm (no CSRF of its own)."""

    icon_name = SelectField('Icon', choices=[(icon.value, icon.value) for icon in EDITABLE_ICONS])
    image_url = StringField('Image URL', validators=[Optional(), URL(message="Please enter a full URL."), Length(max=512)])
    content = TextAreaField('Content', validators=[DataRequired(message="Slide content cannot be empty.")])


class SlidesForm(FlaskForm):
    slides = FieldList(FormField(SlideEntryForm), min_entries=SLIDE_COUNT, max_entries=SLIDE_COUNT)
    submit = SubmitField('Save slides')


class ImportForm(FlaskForm):
    excel_file = FileField('Spreadsheet (.xlsx)', validators=[
        FileRequired(message="Please choose a file."),
        FileAllowed(['xlsx'], 'Only Excel files (.xlsx) are allowed.'),
    ])
    submit = SubmitField('Import')


class DeleteForm(FlaskForm):
    """Empty form; carries the CSRF token for delete buttons."""

    confirm = HiddenField(default='1')
    submit = SubmitField('Delete')
