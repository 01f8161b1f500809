"""
Simple usage example for CogSage

Runs a short offline conversation against in-memory storage and prints
each answer with the pathway that produced it.
"""

import asyncio

from cogsage import CognitiveAgent, PipelineState
from cogsage.lookup import ExternalLookup
from cogsage.responses import format_stats


MESSAGES = [
    "hello!",
    "12 × 5",
    "what is seven times six?",
    "5 / 0",
    "define serendipity",
    "my name is Sam and I live in Lisbon",
    "what's my name?",
    "what time is it?",
    "tell me about nikola tesla",
]


async def main():
    state = PipelineState.in_memory(ExternalLookup(enabled=False))
    agent = CognitiveAgent(state)

    print("=" * 60)
    print("CogSage Simple Example")
    print("=" * 60)

    for message in MESSAGES:
        response = await agent.handle_message(message)
        print(f"\nYou: {message}")
        print(f"CogSage [{response.pathway} {response.confidence:.2f}]: {response.content}")

    print("\n" + "=" * 60)
    print(format_stats(agent.get_stats()))


if __name__ == "__main__":
    asyncio.run(main())
