# File: accelerate_vocab/modules/auth/forms.py
# Purpose: Sign-in form.

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField, SubmitField
from wtforms.validators import DataRequired, Regexp

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class LoginForm(FlaskForm):
    """
    Email and password sign-in.
    """
    email = StringField('Email', validators=[
        DataRequired(message="Please enter your email."),
        Regexp(EMAIL_PATTERN, message="Please enter a valid email address."),
    ])
    password = PasswordField('Password', validators=[DataRequired(message="Please enter your password.")])
    remember_me = BooleanField('Remember me')
    submit = SubmitField('Sign in')


class CreateTestUsersForm(FlaskForm):
    submit = SubmitField('Create Test Users')
