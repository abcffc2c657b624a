from __future__ import annotations

import os
import random
import threading
from datetime import datetime, timedelta, timezone
from itertools import cycle

from locust import HttpUser, between, task


USER_PREFIX = os.getenv("LOADTEST_USER_PREFIX", "load_student_")
USER_PASSWORD = os.getenv("LOADTEST_USER_PASSWORD", "loadtest123")
USER_POOL_SIZE = int(os.getenv("LOADTEST_USER_POOL_SIZE", "120"))
BOOKING_MIN_OFFSET_MIN = int(os.getenv("LOADTEST_MIN_OFFSET_MIN", "30"))
BOOKING_MAX_OFFSET_MIN = int(os.getenv("LOADTEST_MAX_OFFSET_MIN", "720"))
BOOKING_DURATION_MIN = int(os.getenv("LOADTEST_DURATION_MIN", "45"))


class SpacebookUser(HttpUser):
    wait_time = between(0.5, 1.5)

    _user_iterator = cycle(range(USER_POOL_SIZE))
    _lock = threading.Lock()

    def on_start(self) -> None:
        self.username = self._acquire_username()
        self.booked_space_id: int | None = None
        self._authenticate()

    def _acquire_username(self) -> str:
        with SpacebookUser._lock:
            next_idx = next(SpacebookUser._user_iterator)
        return f"{USER_PREFIX}{next_idx:03d}"

    def _authenticate(self) -> None:
        response = self.client.post(
            "/login",
            json={"username": self.username, "password": USER_PASSWORD},
            name="login",
        )
        response.raise_for_status()
        self._token = response.json()["token"]

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    @task(4)
    def list_spaces(self) -> None:
        self.client.get("/allspaces", name="allspaces")

    @task(2)
    def view_my_bookings(self) -> None:
        self.client.get("/viewbooking", headers=self._auth_headers(), name="viewbooking")

    @task(1)
    def book_or_cancel(self) -> None:
        if self.booked_space_id is not None:
            self.client.post(
                "/cancelbooking",
                json={"space_id": self.booked_space_id},
                headers=self._auth_headers(),
                name="cancelbooking",
            )
            self.booked_space_id = None
            return

        response = self.client.get("/allspaces", params={"status": "available"}, name="allspaces_available")
        available = [space["id"] for space in response.json()] if response.ok else []
        if not available:
            return
        space_id = random.choice(available)
        now = datetime.now(timezone.utc).replace(second=0, microsecond=0)
        start_time = now + timedelta(minutes=random.randint(BOOKING_MIN_OFFSET_MIN, BOOKING_MAX_OFFSET_MIN))
        end_time = start_time + timedelta(minutes=BOOKING_DURATION_MIN + random.randint(0, 30))
        with self.client.post(
            "/bookspace",
            json={
                "space_id": space_id,
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
            },
            headers=self._auth_headers(),
            name="bookspace",
            catch_response=True,
        ) as booking:
            # Losing the race for a space is expected under load.
            if booking.status_code == 201:
                self.booked_space_id = space_id
                booking.success()
            elif booking.status_code in (400, 429):
                booking.success()
            else:
                booking.failure(f"unexpected status {booking.status_code}")
