"""One-line dialogue tables keyed by the agent's primary action."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tribesim.simulation.entities import Agent
    from tribesim.simulation.protocols import RandomSource

LOW_RESOURCE_THRESHOLD = 30.0

DIALOGUE_LINES: dict[str, tuple[str, ...]] = {
    "farming": (
        "Harvest is bountiful today!",
        "The crops respond to our care.",
        "Food stores are growing.",
        "Another day, another harvest.",
        "Tribe must eat!",
    ),
    "mining": (
        "Struck something valuable!",
        "The earth provides.",
        "Deep in the mines, I find purpose.",
        "Materials for the tribe!",
        "More resources secured.",
    ),
    "research": (
        "I've discovered something new!",
        "Knowledge is power.",
        "The pieces are coming together.",
        "Eureka! Another breakthrough.",
        "Understanding grows...",
    ),
    "trade": (
        "Anyone need to trade?",
        "Looking for opportunities!",
        "Prosperity through exchange.",
        "Let's make a deal.",
        "Markets are moving!",
    ),
    "combat": (
        "For the glory of the tribe!",
        "Victory or death!",
        "Our territory expands.",
        "None can stand against us!",
        "Battle calls!",
    ),
    "low_resources": (
        "Resources are running low...",
        "We need more supplies.",
        "Survival is difficult.",
        "The tribe struggles.",
        "Can anyone spare resources?",
    ),
    "celebration": (
        "Today is a good day!",
        "The tribe prospers!",
        "Celebration time!",
        "We grow stronger!",
        "Victory!",
    ),
    "greeting": (
        "Greetings, fellow agent!",
        "Hello, friend!",
        "Well met!",
        "Peace be with you.",
        "Good to see you!",
    ),
}


def pick_dialogue(
    agent: Agent,
    action: str,
    rng: RandomSource,
    celebration_chance: float = 0.3,
) -> str:
    """Choose a line for the agent.

    Hungry or exhausted agents complain; otherwise a celebration roll may
    override the action-specific table.

    Args:
        agent: The speaking agent
        action: Primary action label for this day
        rng: Random source
        celebration_chance: Probability of a celebration line when healthy

    Returns:
        The chosen line
    """
    if (
        agent.resources.food < LOW_RESOURCE_THRESHOLD
        or agent.resources.energy < LOW_RESOURCE_THRESHOLD
    ):
        topic = "low_resources"
    elif rng.random() < celebration_chance:
        topic = "celebration"
    else:
        topic = action
    lines = DIALOGUE_LINES.get(topic, DIALOGUE_LINES["greeting"])
    return rng.choice(lines)
