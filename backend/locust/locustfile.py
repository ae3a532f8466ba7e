"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Many customers, one slot
  locust -f locustfile.py --tags throughput   # Availability + court list reads
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

Each simulated user sends its own X-Forwarded-For address so the per-client
booking rate limit does not throttle the whole run.
"""

import random
from datetime import datetime, timedelta, timezone

from locust import HttpUser, task, between, tag, events

COURT_ID = 1
# A date inside the booking window, far enough out that no slot is in the past
CONTESTED_DATE = (datetime.now(timezone(timedelta(hours=8))) + timedelta(days=7)).date().isoformat()
CONTESTED_START = "18:00"
CONTESTED_END = "20:00"


def random_ip():
    return f"10.{random.randint(0, 255)}.{random.randint(0, 255)}.{random.randint(1, 254)}"


def random_phone():
    return "09" + "".join(random.choices("0123456789", k=9))


def booking_payload(start=CONTESTED_START, end=CONTESTED_END, day=CONTESTED_DATE):
    return {
        "customer_name": "Load Tester",
        "customer_email": f"load_{random.randint(10000, 99999)}@test.com",
        "customer_phone": random_phone(),
        "court_id": COURT_ID,
        "date": day,
        "start_time": start,
        "end_time": end,
        "payment_method": random.choice(["GCASH", "MAYA"]),
        "reference_code": f"REF-{random.randint(100000, 999999)}",
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Contested slot: court {COURT_ID} on {CONTESTED_DATE} "
          f"{CONTESTED_START}-{CONTESTED_END}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - N customers, one 2-hour slot

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings
       WHERE court_id = 1 AND date = '<date>' AND status != 'CANCELLED'
         AND start_time < '20:00' AND end_time > '18:00';
    Should be <= 1
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = {"X-Forwarded-For": random_ip()}

    @tag("concurrency")
    @task
    def book_contested_slot(self):
        """Everyone fights for the same hours; exactly one may win."""
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(),
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            elif resp.status_code == 429:
                resp.success()  # This client's quota is spent
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("concurrency")
    @task
    def book_overlapping_slot(self):
        """Overlaps the contested range by one hour; must also be refused once taken."""
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(start="19:00", end="21:00"),
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409, 429):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - read paths

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: Stop Redis, run again

    Compare the court list latency; availability is never cached.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def poll_availability(self):
        day = (datetime.now(timezone(timedelta(hours=8))) + timedelta(days=random.randint(0, 30)))
        self.client.get(
            f"/api/v1/available-slots?date={day.date().isoformat()}&courtId={COURT_ID}",
            name="/api/v1/available-slots",
        )

    @tag("throughput", "read")
    @task(3)
    def list_courts_cached(self):
        self.client.get("/api/v1/courts/", name="/api/v1/courts/ [cached]")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = {"X-Forwarded-For": random_ip()}

    def _expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_court(self):
        payload = booking_payload()
        payload["court_id"] = 999999
        with self.client.post("/api/v1/bookings/", json=payload,
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 429))

    @tag("edge")
    @task
    def end_before_start(self):
        with self.client.post("/api/v1/bookings/",
                              json=booking_payload(start="15:00", end="14:00"),
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 429))

    @tag("edge")
    @task
    def too_long(self):
        with self.client.post("/api/v1/bookings/",
                              json=booking_payload(start="06:00", end="16:00"),
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 429))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/bookings/", data="not json at all",
                              headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 429))

    @tag("edge")
    @task
    def tampered_reference(self):
        with self.client.get("/api/v1/bookings/lookup?ref=AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA",
                             name="/api/v1/bookings/lookup [tampered]",
                             catch_response=True) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def verify_without_auth(self):
        with self.client.post("/api/v1/admin/payments/verify",
                              json={"paymentId": 1, "approved": True},
                              catch_response=True) as resp:
            self._expect(resp, (401,))


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing availability, some bookings on random hours, and
    status lookups with the returned reference.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = {"X-Forwarded-For": random_ip()}
        self.references = []

    @task(50)
    def browse(self):
        day = (datetime.now(timezone(timedelta(hours=8))) + timedelta(days=random.randint(1, 14)))
        self.client.get(
            f"/api/v1/available-slots?date={day.date().isoformat()}&courtId={COURT_ID}",
            name="/api/v1/available-slots",
        )

    @task(10)
    def book_random_hour(self):
        day = (datetime.now(timezone(timedelta(hours=8))) + timedelta(days=random.randint(1, 14)))
        start = random.randint(6, 20)
        with self.client.post("/api/v1/bookings/",
                              json=booking_payload(f"{start:02d}:00", f"{start + 1:02d}:00",
                                                   day.date().isoformat()),
                              headers=self.headers, catch_response=True) as resp:
            if resp.status_code == 201:
                self.references.append(resp.json()["encrypted_reference"])
                resp.success()
            elif resp.status_code in (409, 429):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @task(5)
    def lookup_booking(self):
        if self.references:
            self.client.get(f"/api/v1/bookings/lookup?ref={random.choice(self.references)}",
                            name="/api/v1/bookings/lookup")
