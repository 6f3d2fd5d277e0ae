"""Rollout over chains of integrated models."""

from stagewise.stepping.rollout import Trajectory, rollout

__all__ = [
    "Trajectory",
    "rollout",
]
