"""Drive a running API as one learner: tracker samples, a login, an interaction, then the summary."""
import asyncio
import sys
import uuid

import httpx

sys.path.insert(0, ".")
from learnpulse.client import EngagementTracker, HttpEngagementTransport
from learnpulse.kernel.identity import JWTManager

BASE = "http://localhost:8000/api/v1"
MATERIAL_ID = sys.argv[1] if len(sys.argv) > 1 else None


async def main():
    learner_id = uuid.uuid4()
    token, _, _ = JWTManager().create_access_token(learner_id, role="student")
    headers = {"Authorization": f"Bearer {token}"}
    print(f"Learner: {learner_id}")

    transport = HttpEngagementTransport(BASE, token=token)
    tracker = EngagementTracker(
        transport,
        resource_id=MATERIAL_ID or "demo-material",
        resource_type="Visual",
        batch_seconds=2,
        idle_timeout_seconds=4,
    )
    tracker.mount()
    tracker.report_activity()
    await asyncio.sleep(5)
    tracker.close()
    await transport.aclose()
    print("Tracker finished (idle cutoff after 4s)")

    async with httpx.AsyncClient(base_url=BASE, timeout=15) as client:
        r = await client.post("/gamification/login", headers=headers)
        print(f"Login: {r.status_code} {r.json()}")

        if MATERIAL_ID:
            r = await client.post(f"/gamification/materials/{MATERIAL_ID}/interaction", json={}, headers=headers)
            print(f"Interaction: {r.status_code} {r.json()}")

        r = await client.get("/gamification/summary", headers=headers)
        summary = r.json()
        print(f"\n=== XP: {summary['xp']} ===")
        print(f"Login streak: {summary['streaks']['login']['count']}")
        print(f"Lesson streak: {summary['streaks']['lesson']['count']}")
        goal = summary["dailyGoal"]
        print(f"Daily goal: lessons {goal['lessonsCompletedToday']}/{goal['lessonsTarget']}, "
              f"logins {goal['loginsCompletedToday']}/{goal['loginsTarget']}")
        for badge in summary["badges"]:
            print(f"  [{badge['badgeId']}] {badge['title']}")


asyncio.run(main())
