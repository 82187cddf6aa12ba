from __future__ import annotations
from dataclasses import dataclass

from core.config import AppConfig
from core.logger import AppLogger
from model.state import InstrumentState
from modulation.table import ModulationTable
from params.controller import ParamController
from transport.clock import SharedClock, bind_state


@dataclass
class Session:
    config: AppConfig
    logger: AppLogger
    clock: SharedClock
    state: InstrumentState
    controller: ParamController
    modulation: ModulationTable


def create_session(config: AppConfig | None = None, clock: SharedClock | None = None) -> Session:
    """Wire one instrument to a clock, logger and settings.

    Pass an existing ``clock`` to share tempo with other instruments.
    """
    config = config or AppConfig()
    logger = AppLogger(echo=config.log_echo)
    state = InstrumentState()
    if clock is None:
        clock = SharedClock(state.bpm, state.swing, state.bar_length, logger=logger)
    bind_state(clock, state)
    controller = ParamController(state, clock=clock, config=config, logger=logger)
    modulation = ModulationTable(controller, config, logger)
    logger.general(f"Session ready: {state.voice_count} voices, {len(controller.list_parameters())} parameters")
    return Session(config, logger, clock, state, controller, modulation)
