from __future__ import annotations

import os
from datetime import timedelta

os.environ.setdefault("EXPIRY_SWEEPER_ENABLED", "False")

from spacebook import create_app  # noqa: E402
from spacebook.errors import ConflictError  # noqa: E402
from spacebook.extensions import db  # noqa: E402
from spacebook.models import Space, UserRole  # noqa: E402
from spacebook.services import spaces, users  # noqa: E402
from spacebook.utils.datetime import utcnow  # noqa: E402


def seed_users():
    for username, password, role in (
        ('admin', 'admin1234', UserRole.admin),
        ('student', 'student1234', UserRole.student),
        ('guest', 'guest1234', UserRole.student),
    ):
        try:
            users.create_user(username, password, role=role)
        except ConflictError:
            pass


def seed_spaces():
    existing = {space.name for space in db.session.execute(db.select(Space)).scalars()}
    today = utcnow().replace(hour=8, minute=0, second=0, microsecond=0)
    defaults = [
        ('Study Room A', 'Library Level 2', 'Quiet room, 6 seats'),
        ('Study Room B', 'Library Level 2', 'Whiteboard and screen'),
        ('Discussion Pod 1', 'Block W, Level 3', 'Up to 4 people'),
        ('Makerspace Bench', 'Block E, Level 1', 'Safety briefing required'),
    ]
    for name, location, notes in defaults:
        if name in existing:
            continue
        spaces.create_space({
            'name': name,
            'location': location,
            'usage_notes': notes,
            'start_time': today,
            'end_time': today + timedelta(days=30, hours=14),
        })


def run():
    app = create_app()
    with app.app_context():
        db.create_all()
        seed_users()
        seed_spaces()
        print('Seed completed')


if __name__ == '__main__':
    run()
