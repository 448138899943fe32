"""Euchre game-state machine."""

from euchre.engine.state_machine import ACTION_PHASES, Action, EuchreStateMachine

__all__ = ["ACTION_PHASES", "Action", "EuchreStateMachine"]
