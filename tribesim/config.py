"""Configuration settings for the tribesim simulation.

Uses Pydantic Settings for validation and environment variable support.
All settings can be overridden via TRIBESIM_* environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class SimulationConfig(BaseSettings):
    """Global configuration for the tribe simulation."""

    # World
    grid_size: int = 10
    seed: int = 42
    max_days: int = 365

    # Tribes
    tribes: list[str] = Field(default=["Alpha", "Beta", "Gamma"])
    agents_per_tribe: int = 20
    tribe_centers: dict[str, tuple[float, float]] = Field(
        default={
            "Alpha": (-350.0, -350.0),
            "Beta": (350.0, -350.0),
            "Gamma": (0.0, 350.0),
        }
    )
    spawn_spread: float = 250.0  # world units around the tribe center

    # Starting stocks
    starting_food: float = 100.0
    starting_energy: float = 100.0
    starting_materials: float = 50.0
    starting_knowledge: float = 0.0
    starting_social_capital: float = 50.0

    # Daily upkeep and regeneration
    food_upkeep: float = 2.0
    energy_upkeep: float = 1.0
    food_regen: float = 1.0
    energy_regen: float = 1.0

    # Skill production (resource, tokens, experience)
    farming_yield: float = 12.0
    farming_tokens: int = 2
    farming_xp: int = 2
    mining_yield: float = 8.0
    mining_tokens: int = 3
    mining_xp: int = 3
    research_yield: float = 5.0
    research_tokens: int = 5
    research_xp: int = 5

    # Probabilities
    ability_chance: float = 0.10
    dialogue_chance: float = 0.15
    celebration_dialogue_chance: float = 0.30
    territory_claim_chance: float = 0.05
    alliance_chance: float = 0.40
    reconcile_chance: float = 0.30
    same_tribe_fight_chance: float = 0.10

    # Proximity (world units)
    interaction_radius: float = 1.0
    ability_radius: float = 2.0
    support_radius: float = 100.0
    max_defenders: int = 3

    # Trade
    trade_threshold: float = 50.0
    trade_amount: float = 10.0
    trade_reward: int = 10

    # Combat
    counter_damage: float = 10.0
    combat_reward: int = 15
    steal_fraction: float = 0.3
    max_stolen_food: float = 20.0
    max_stolen_materials: float = 10.0

    # Diplomacy rewards between agents
    alliance_social_gain: float = 10.0
    alliance_reward: int = 20
    peace_social_gain: float = 20.0
    peace_reward: int = 25

    # Leveling
    xp_per_level: int = 100
    level_up_reward: int = 50

    # Messages
    message_log_cap: int = 100
    message_display_ticks: int = 5

    # Periodic steps
    territory_decay_interval: int = 10
    diplomacy_interval: int = 15
    territory_claim_strength: float = 10.0

    # Checkpointing
    checkpoint_interval: int = 0  # 0 = disabled
    checkpoint_dir: str = "data/checkpoints"
    checkpoint_max: int = 10

    # Logging
    log_level: str = "WARNING"

    model_config = {"env_prefix": "TRIBESIM_"}
