"""Haptic actuators and the feedback dispatcher."""

from .actuators import Actuator, MockActuator, NoOpActuator, SerialActuator
from .dispatcher import FeedbackDispatcher

__all__ = ["Actuator", "FeedbackDispatcher", "MockActuator", "NoOpActuator", "SerialActuator"]
