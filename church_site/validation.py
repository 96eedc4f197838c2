"""
Forms

One FlaskForm per screen. The *_form helpers bind a mapping (request.form or
a JSON body), validate it and return the cleaned fields ready for the record
store, raising ValidationError with one message per failing field.

CSRFProtect checks the token of every POST before a view runs, so the forms
are bound with csrf turned off.
"""

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (
    BooleanField, DateField, IntegerField, PasswordField, SelectField, StringField, TextAreaField,
)
from wtforms import validators as v

from church_site.errors import ValidationError
from church_site.models.gallery import GALLERY_CATEGORIES

PHONE_PATTERN = r'^\(\d{2}\) \d{4,5}-\d{4}$'
PERSON_NAME_PATTERN = r'^[a-zA-ZÀ-ÿ\s]+$'
CHURCH_NAME_PATTERN = r"^[a-zA-ZÀ-ÿ0-9\s.,'-]+$"

DISPOSABLE_DOMAINS = frozenset({
    'tempmail.com', 'throwaway.com', 'guerrillamail.com', 'mailinator.com',
    '10minutemail.com', 'fakeinbox.com', 'trashmail.com', 'yopmail.com',
    'getnada.com', 'temp-mail.org',
})


def strip(value):
    return value.strip() if isinstance(value, str) else value


def lower(value):
    return value.lower() if isinstance(value, str) else value


def sized(min_len, max_len, min_msg, max_msg):
    return [v.Length(min=min_len, message=min_msg), v.Length(max=max_len, message=max_msg)]


def not_disposable(form, field):
    if field.data and field.data.rsplit('@', 1)[-1] in DISPOSABLE_DOMAINS:
        raise v.ValidationError('Email domain not allowed')


class SiteForm(FlaskForm):
    """Base form: empty strings become None, missing values fall back to the field default."""

    def cleaned(self):
        out = {}
        for field in self:
            value = field.data
            if isinstance(value, str) and not value:
                value = None
            if value is None and field.default is not None:
                value = field.default
            out[field.name] = value
        return out


class DateRangeMixin:
    def validate_end_date(self, field):
        start = self.start_date.data
        if field.data and start and field.data < start:
            raise v.ValidationError('End date must be on or after the start date')


class VerseForm(DateRangeMixin, SiteForm):
    book = StringField('Book', filters=[strip],
                       validators=sized(1, 50, 'Select the book', 'Book name is too long'))
    reference = StringField('Reference', filters=[strip],
                            validators=sized(1, 20, 'Enter chapter and verse', 'Reference is too long'))
    text = TextAreaField('Text', filters=[strip],
                         validators=sized(10, 1000, 'Verse text is too short',
                                          'Text must be at most 1000 characters'))
    start_date = DateField('Start date', validators=[v.Optional()])
    end_date = DateField('End date', validators=[v.Optional()])
    active = BooleanField('Active')


class EventForm(DateRangeMixin, SiteForm):
    title = StringField('Title', filters=[strip],
                        validators=sized(3, 200, 'Title must be at least 3 characters',
                                         'Title must be at most 200 characters'))
    description = TextAreaField('Description', filters=[strip],
                                validators=sized(10, 1000, 'Description must be at least 10 characters',
                                                 'Description must be at most 1000 characters'))
    start_date = DateField('Start date', validators=[v.InputRequired('Start date is required')])
    end_date = DateField('End date', validators=[v.Optional()])
    time = StringField('Time', filters=[strip],
                       validators=sized(1, 50, 'Time is required', 'Time is too long'))
    location = StringField('Location', filters=[strip],
                           validators=sized(3, 200, 'Location must be at least 3 characters',
                                            'Location must be at most 200 characters'))
    image_url = StringField('Image URL', filters=[strip],
                            validators=[v.Optional(), v.URL(message='Invalid image URL')])


class StudyForm(SiteForm):
    title = StringField('Title', filters=[strip],
                        validators=sized(3, 200, 'Title must be at least 3 characters',
                                         'Title must be at most 200 characters'))
    book = StringField('Book', filters=[strip],
                       validators=sized(1, 50, 'Select the book', 'Book name is too long'))
    reference = StringField('Reference', filters=[strip],
                            validators=sized(1, 20, 'Enter chapter and verse', 'Reference is too long'))
    verse_text = TextAreaField('Verse text', filters=[strip],
                               validators=sized(10, 1000, 'Verse text is too short',
                                                'Verse text must be at most 1000 characters'))
    content = TextAreaField('Content', filters=[strip],
                            validators=sized(10, 10000, 'Content must be at least 10 characters',
                                             'Content is too long'))
    category = StringField('Category', filters=[strip],
                           validators=sized(1, 100, 'Select a category', 'Category is too long'))
    study_date = DateField('Date', validators=[v.InputRequired('Date is required')])


class GalleryForm(SiteForm):
    title = StringField('Title', filters=[strip],
                        validators=sized(3, 100, 'Title must be at least 3 characters',
                                         'Title must be at most 100 characters'))
    url = StringField('Image URL', filters=[strip],
                      validators=[v.Optional(), v.URL(message='Invalid image URL')])
    category = SelectField('Category', choices=list(GALLERY_CATEGORIES), default=GALLERY_CATEGORIES[0])
    description = TextAreaField('Description', filters=[strip],
                                validators=[v.Optional(),
                                            v.Length(max=500, message='Description must be at most 500 characters')])
    sort_order = IntegerField('Order', default=0, validators=[v.Optional()])


class TeamForm(SiteForm):
    name = StringField('Name', filters=[strip],
                       validators=sized(3, 100, 'Name must be at least 3 characters',
                                        'Name must be at most 100 characters'))
    position = StringField('Position', filters=[strip],
                           validators=sized(3, 100, 'Position must be at least 3 characters',
                                            'Position must be at most 100 characters'))
    photo_url = StringField('Photo URL', filters=[strip],
                            validators=[v.Optional(), v.URL(message='Invalid photo URL')])
    description = TextAreaField('Description', filters=[strip],
                                validators=sized(10, 1000, 'Description must be at least 10 characters',
                                                 'Description must be at most 1000 characters'))
    active = BooleanField('Active')
    sort_order = IntegerField('Order', default=0, validators=[v.Optional()])


class SettingsForm(SiteForm):
    name = StringField('Church name', filters=[strip], validators=[
        *sized(3, 200, 'Name must be at least 3 characters', 'Name must be at most 200 characters'),
        v.Regexp(CHURCH_NAME_PATTERN, message='Name contains invalid characters'),
    ])
    address = TextAreaField('Address', filters=[strip],
                            validators=sized(10, 500, 'Address must be more detailed (at least 10 characters)',
                                             'Address must be at most 500 characters'))
    phone = StringField('Phone', filters=[strip], validators=[
        v.InputRequired('Phone is required'),
        v.Regexp(PHONE_PATTERN, message='Invalid format. Use (XX) XXXXX-XXXX or (XX) XXXX-XXXX'),
    ])
    whatsapp = StringField('WhatsApp', filters=[strip], validators=[
        v.Optional(), v.Regexp(PHONE_PATTERN, message='Invalid format. Use (XX) XXXXX-XXXX'),
    ])
    email = StringField('Email', filters=[strip, lower], validators=[
        v.InputRequired('Email is required'),
        v.Length(max=255, message='Email must be at most 255 characters'),
        v.Email(message='Invalid email format'),
        not_disposable,
    ])
    service_times = TextAreaField('Service times', filters=[strip], validators=[
        v.Optional(), v.Length(max=1000, message='Service times are too long'),
    ])
    mission = TextAreaField('Mission', filters=[strip], validators=[
        v.Optional(), *sized(20, 2000, 'Mission must be at least 20 characters',
                             'Mission must be at most 2000 characters'),
    ])
    vision = TextAreaField('Vision', filters=[strip], validators=[
        v.Optional(), *sized(20, 2000, 'Vision must be at least 20 characters',
                             'Vision must be at most 2000 characters'),
    ])
    facebook_url = StringField('Facebook', filters=[strip], validators=[v.Optional(), v.URL(message='Invalid URL')])
    instagram_url = StringField('Instagram', filters=[strip], validators=[v.Optional(), v.URL(message='Invalid URL')])
    youtube_url = StringField('YouTube', filters=[strip], validators=[v.Optional(), v.URL(message='Invalid URL')])


class ContactForm(SiteForm):
    name = StringField('Name', filters=[strip], validators=[
        *sized(3, 100, 'Name must be at least 3 characters', 'Name is too long'),
        v.Regexp(PERSON_NAME_PATTERN, message='Name must contain only letters'),
    ])
    email = StringField('Email', filters=[strip, lower], validators=[
        v.InputRequired('Invalid email'),
        v.Length(max=255, message='Email is too long'),
        v.Email(message='Invalid email'),
    ])
    phone = StringField('Phone', filters=[strip], validators=[
        v.Optional(), v.Regexp(PHONE_PATTERN, message='Format: (99) 99999-9999'),
    ])
    subject = StringField('Subject', filters=[strip],
                          validators=sized(3, 200, 'Subject must be at least 3 characters', 'Subject is too long'))
    message = TextAreaField('Message', filters=[strip],
                            validators=sized(10, 1000, 'Message must be at least 10 characters',
                                             'Message is too long'))


class LoginForm(SiteForm):
    email = StringField('Email', filters=[strip, lower], validators=[v.InputRequired()])
    password = PasswordField('Password', validators=[v.InputRequired()])


class RegisterForm(SiteForm):
    name = StringField('Full name', filters=[strip], validators=[
        *sized(3, 100, 'Name must be at least 3 characters', 'Name is too long'),
        v.Regexp(PERSON_NAME_PATTERN, message='Name must contain only letters'),
    ])
    email = StringField('Email', filters=[strip, lower], validators=[
        v.InputRequired('Email is required'),
        v.Length(max=255, message='Email is too long'),
        v.Email(message='Invalid email'),
        not_disposable,
    ])
    phone = StringField('Phone', filters=[strip], validators=[
        v.Optional(), v.Regexp(PHONE_PATTERN, message='Format: (99) 99999-9999'),
    ])
    password = PasswordField('Password', validators=[
        v.Length(min=6, message='Password must be at least 6 characters'),
    ])
    confirm_password = PasswordField('Confirm password', validators=[
        v.EqualTo('password', message='Passwords do not match'),
    ])


class ForgotPasswordForm(SiteForm):
    email = StringField('Email', filters=[strip, lower], validators=[
        v.InputRequired('Email is required'), v.Email(message='Invalid email'),
    ])


class ResetPasswordForm(SiteForm):
    password = PasswordField('New password', validators=[
        v.Length(min=6, message='Password must be at least 6 characters'),
    ])
    confirm_password = PasswordField('Confirm password', validators=[
        v.EqualTo('password', message='Passwords do not match'),
    ])


def _formdata(data):
    if isinstance(data, MultiDict):
        return data
    return MultiDict({key: '' if value is None else str(value) for key, value in (data or {}).items()})


def validate(form_class, data):
    """Bind `data` to `form_class` and return the cleaned fields."""
    form = form_class(formdata=_formdata(data), meta={'csrf': False})
    if not form.validate():
        raise ValidationError({name: messages[0] for name, messages in form.errors.items()})
    return form.cleaned()


def verse_form(data):
    return validate(VerseForm, data)


def event_form(data):
    return validate(EventForm, data)


def study_form(data):
    return validate(StudyForm, data)


def gallery_form(data):
    return validate(GalleryForm, data)


def team_form(data):
    return validate(TeamForm, data)


def settings_form(data):
    return validate(SettingsForm, data)


def contact_form(data):
    return validate(ContactForm, data)
