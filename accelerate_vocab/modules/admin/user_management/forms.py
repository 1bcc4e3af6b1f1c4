# File: accelerate_vocab/modules/admin/user_management/forms.py
# Purpose: Pupil create/edit forms.

from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, Regexp

from .services import MIN_PASSWORD_LENGTH
from ...auth.forms import EMAIL_PATTERN


class PupilForm(FlaskForm):
    """
    Create a pupil. Every field is required.
    """
    name = StringField('Name', validators=[DataRequired(message="Please enter a name."), Length(max=255)])
    email = StringField('Email', validators=[
        DataRequired(message="Please enter an email."),
        Regexp(EMAIL_PATTERN, message="Please enter a valid email address."),
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message="Please enter a password."),
        Length(min=MIN_PASSWORD_LENGTH, message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"),
    ])
    submit = SubmitField('Create pupil')


class EditPupilForm(FlaskForm):
    """
    Partial update: blank fields are left unchanged.
    """
    name = StringField('Name', validators=[Optional(), Length(max=255)])
    email = StringField('Email', validators=[
        Optional(),
        Regexp(EMAIL_PATTERN, message="Please enter a valid email address."),
    ])
    password = PasswordField('New password (leave blank to keep)', validators=[
        Optional(),
        Length(min=MIN_PASSWORD_LENGTH, message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"),
    ])
    submit = SubmitField('Save changes')
