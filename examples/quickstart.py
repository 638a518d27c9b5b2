"""RelayKit quickstart — hand a web chat customer over to a Teams agent.

Uses the in-memory store and the mock transport, so nothing leaves the
process. Swap ``MockTransport`` for ``BotFrameworkTransport`` or
``WebhookHTTPTransport`` to talk to real channels.

Run with:
    uv run python examples/quickstart.py
"""

from __future__ import annotations

import asyncio
import logging

from relaykit import (
    Activity,
    ChannelAccount,
    ConsoleTelemetryProvider,
    MessageRouter,
    MockTransport,
    RouterConfig,
)

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

BOT = ChannelAccount(id="relay-bot", name="RelayBot")
CAROL = ChannelAccount(id="customer-1", name="Carol")
DAVE = ChannelAccount(id="agent-1", name="Dave")


def web_message(text: str) -> Activity:
    return Activity.message(
        text,
        channel_id="webchat",
        conversation_id="web-conv-1",
        from_account=CAROL,
        recipient=BOT,
    )


def teams_message(text: str, channel_data: dict | None = None) -> Activity:
    return Activity.message(
        text,
        channel_id="msteams",
        conversation_id="agent-conv-1",
        from_account=DAVE,
        recipient=BOT,
        service_url="https://smba.trafficmanager.net/teams/",
        channel_data=channel_data,
    )


async def main() -> None:
    # --- Setup -----------------------------------------------------------
    transport = MockTransport()
    telemetry = ConsoleTelemetryProvider(log_span_start=True)
    router = MessageRouter(transport, config=RouterConfig(), telemetry=telemetry)

    # --- Customer asks for help ------------------------------------------
    result = await router.handle_activity(
        web_message("Hi, my order never arrived"), initiate_engagement_if_not_engaged=True
    )
    print(f"Carol asked for help -> {result.type}")

    # --- Agent accepts through the back channel --------------------------
    customer = web_message("").sender_party()
    accept = teams_message(
        "backchannel accept",
        channel_data={"backchannel": {"conversationId": customer.to_json()}},
    )
    result = await router.handle_activity(accept)
    print(f"Dave accepted -> {result.type}, engaged with {result.client}")

    # --- Relay -----------------------------------------------------------
    await router.handle_activity(teams_message("Sorry about that, let me check."))
    await router.handle_activity(web_message("Order #1234"))

    print(f"\nRelayed messages ({len(transport.sent)}):")
    for sent in transport.sent:
        print(f"  -> {sent['party'].channel_id}: {sent['message']}")

    # --- Close -----------------------------------------------------------
    results = await router.end_engagement(accept.sender_party())
    print(f"\nDave closed the conversation -> {[str(r.type) for r in results]}")

    telemetry.close()


if __name__ == "__main__":
    asyncio.run(main())
