"""Create (or re-enable) an administrator account.

Usage: python scripts/create_admin.py EMAIL PASSWORD [NAME]
"""
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash

from church_site import create_app
from church_site.auth.gate import ADMIN_ROLE
from church_site.extensions import db
from church_site.models import Administrator, User

if len(sys.argv) < 3:
    print(__doc__)
    sys.exit(1)

email = sys.argv[1].strip().lower()
password = sys.argv[2]
name = sys.argv[3] if len(sys.argv) > 3 else None

app = create_app()

with app.app_context():
    user = User.query.filter_by(email=email).first()

    if not user:
        user = User(
            email=email,
            password_hash=generate_password_hash(password),
            user_metadata={'role': ADMIN_ROLE},
        )
        db.session.add(user)
        db.session.flush()
        print("New admin user created")
    else:
        user.password_hash = generate_password_hash(password)
        user.user_metadata = {**(user.user_metadata or {}), 'role': ADMIN_ROLE}
        print("Existing user promoted to admin")

    admin = Administrator.query.filter_by(user_id=user.id).first()
    if not admin:
        db.session.add(Administrator(user_id=user.id, name=name, active=True))
    else:
        admin.active = True
        if name:
            admin.name = name

    db.session.commit()
