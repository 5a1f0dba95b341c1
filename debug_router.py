import asyncio
import logging
import sys

from directgo_server.config import SettingsProvider, settings
from directgo_server.debug_log import recent_debug_events
from directgo_server.navigation import RecordingNavigator
from directgo_server.orchestrator import QueryRouter

# Force UTF-8
sys.stdout.reconfigure(encoding='utf-8')
sys.stderr.reconfigure(encoding='utf-8')


async def main(user_input: str):
    print(f"Model: {settings.model}")
    print(f"Endpoint: {settings.api_endpoint}")
    provider = SettingsProvider(settings, overrides={"enable_debug_logs": True})
    router = QueryRouter(settings_provider=provider, navigator=RecordingNavigator())

    print(f"Input: {user_input}")
    try:
        session = await router.route_query(user_input)
    finally:
        await router.close()

    for record in session.navigations:
        print(f"  [{record.stage}] {record.url}")
    print(f"Final: {session.stage.label} -> {session.current_url}")

    print("Debug events:")
    for entry in recent_debug_events():
        print(f"  {entry['event']}: {entry['data']}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    text = " ".join(sys.argv[1:]) or "b站 影视飓风的最新视频"
    asyncio.run(main(text))
