"""Battle service: the entry point callers use to start battles.

Loads user settings once, applies the log level and hands every new session
the shared game data, settings and a seeded RNG.
"""
from __future__ import annotations
from typing import Optional
import random

from skirmish.core.logging import logger
from skirmish.data.loader import GameData, default_data
from skirmish.system.settings import Settings, SettingsData
from .ai import Policy
from .items import ItemHandler
from .models import CreatureInstance
from .session import BattleSession, OpponentSpec


class BattleService:
    def __init__(self, settings: Optional[SettingsData] = None, data: Optional[GameData] = None):
        self._settings = settings
        self._data = data

    @property
    def settings(self) -> SettingsData:
        if self._settings is None:
            loaded = Settings.load()
            loaded.apply_logging()
            self._settings = loaded.data
        return self._settings

    @property
    def data(self) -> GameData:
        if self._data is None:
            self._data = default_data()
        return self._data

    def start_battle(
        self,
        player: CreatureInstance,
        opponent: OpponentSpec,
        *,
        is_trainer: bool = False,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        choose_action: Optional[Policy] = None,
        item_handler: Optional[ItemHandler] = None,
        caught_species: int = 0,
    ) -> BattleSession:
        """Start a session. caught_species is the player's species-caught tally (critical captures)."""
        settings = self.settings
        if rng is None:
            rng = random.Random(seed if seed is not None else settings.seed)
        logger.debug("BattleRequested", trainer=is_trainer, seed=seed, caught_species=caught_species)
        return BattleSession.start(
            player, opponent,
            data=self.data, rng=rng, settings=settings, is_trainer=is_trainer,
            choose_action=choose_action, item_handler=item_handler, caught_species=caught_species,
        )

__all__ = ["BattleService"]
