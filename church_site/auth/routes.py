"""
Auth Routes

Administrator login, member sign-up and login, password reset and logout.
"""

import logging

from flask import current_app, render_template, request, redirect, url_for, flash
from flask_login import current_user

from church_site.auth import auth_bp
from church_site.auth.gate import end_session, is_active_admin, sign_in
from church_site.auth.members import (
    EmailTaken, register_member, reset_token, set_password, sign_in_member, user_for_token,
)
from church_site.errors import AuthError, StoreError, ValidationError
from church_site.extensions import db
from church_site.models import User
from church_site.services.mailer import send_email
from church_site.validation import (
    ForgotPasswordForm, LoginForm, RegisterForm, ResetPasswordForm, validate,
)

logger = logging.getLogger(__name__)

RESET_SENT = 'If this email is registered, you will receive a link to reset your password.'


@auth_bp.route('/login')
def login():
    """Choose between member and administrator access"""
    return render_template('auth/choose.html')


@auth_bp.route('/login/admin', methods=['GET', 'POST'])
def admin_login():
    """Admin login page"""
    if current_user.is_authenticated and is_active_admin(current_user):
        return redirect(url_for('admin.dashboard'))

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')

        if not email or not password:
            flash('Please enter both email and password.', 'danger')
            return render_template('auth/login.html', email=email), 400

        try:
            sign_in(email, password)
        except AuthError as e:
            flash(e.message, 'danger')
            return render_template('auth/login.html', email=email), 401

        flash('Welcome, Administrator!', 'success')
        return redirect(url_for('admin.dashboard'))

    return render_template('auth/login.html')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Member sign-up"""
    if current_user.is_authenticated:
        return redirect(url_for('public.home'))

    if request.method == 'POST':
        try:
            fields = validate(RegisterForm, request.form)
            register_member(fields['name'], fields['email'], fields['password'], fields['phone'])
        except ValidationError as e:
            return render_template('auth/register.html', form=request.form, errors=e.errors), 400
        except StoreError as e:
            flash(e.message, 'danger')
            status = 409 if isinstance(e, EmailTaken) else 500
            return render_template('auth/register.html', form=request.form, errors={}), status

        flash('Registration successful! Please log in.', 'success')
        return redirect(url_for('auth.member_login'))

    return render_template('auth/register.html', form={}, errors={})


@auth_bp.route('/login/member', methods=['GET', 'POST'])
def member_login():
    """Member login page"""
    if current_user.is_authenticated:
        return redirect(url_for('public.home'))

    if request.method == 'POST':
        try:
            fields = validate(LoginForm, request.form)
            user = sign_in_member(fields['email'], fields['password'])
        except ValidationError:
            flash('Please enter both email and password.', 'danger')
            return render_template('auth/member_login.html', email=request.form.get('email', '')), 400
        except AuthError as e:
            flash(e.message, 'danger')
            return render_template('auth/member_login.html', email=request.form.get('email', '')), 401

        flash(f"Welcome, {user.worshipper.name if user.worshipper else user.email}!", 'success')
        return redirect(url_for('public.home'))

    return render_template('auth/member_login.html')


@auth_bp.route('/forgot-password', methods=['GET', 'POST'])
def forgot_password():
    """Send a reset link. The answer is the same whether or not the e-mail exists."""
    if request.method == 'POST':
        try:
            fields = validate(ForgotPasswordForm, request.form)
        except ValidationError as e:
            return render_template('auth/forgot_password.html', form=request.form, errors=e.errors), 400

        user = db.session.query(User).filter_by(email=fields['email']).first()
        if user is not None:
            config = current_app.config
            link = config['SITE_URL'].rstrip('/') + url_for('auth.reset_password', token=reset_token(user))
            _, error = send_email(
                sender=config['MAIL_FROM'],
                to=user.email,
                reply_to=config['CONTACT_EMAIL'],
                subject='Reset your password',
                html=render_template('email/reset_password.html', link=link),
            )
            if error:
                logger.error('Could not send reset e-mail user_id=%s: %s', user.id, error)

        flash(RESET_SENT, 'info')
        return redirect(url_for('auth.member_login'))

    return render_template('auth/forgot_password.html', form={}, errors={})


@auth_bp.route('/reset-password/<token>', methods=['GET', 'POST'])
def reset_password(token):
    user = user_for_token(token)
    if user is None:
        flash('This reset link is invalid or has expired.', 'danger')
        return redirect(url_for('auth.forgot_password'))

    if request.method == 'POST':
        try:
            fields = validate(ResetPasswordForm, request.form)
            set_password(user, fields['password'])
        except ValidationError as e:
            return render_template('auth/reset_password.html', token=token, errors=e.errors), 400
        except StoreError as e:
            flash(e.message, 'danger')
            return render_template('auth/reset_password.html', token=token, errors={}), 500

        flash('Password updated. Please log in.', 'success')
        return redirect(url_for('auth.member_login'))

    return render_template('auth/reset_password.html', token=token, errors={})


@auth_bp.route('/logout')
def logout():
    """Sign out and drop the whole session."""
    end_session()
    flash('You have been logged out.', 'info')
    return redirect(url_for('auth.login'))
